import math

import numpy as np

SPARSE_GLYPH = "."
MEDIUM_GLYPH = "*"
DENSE_GLYPH = "@"

SPARSE_THRESHOLD = 50
MEDIUM_THRESHOLD = 20


def select_glyph(
    distance2: float,
    thresholds: tuple[float, float] = (SPARSE_THRESHOLD, MEDIUM_THRESHOLD),
    glyphs: tuple[str, str, str] = (SPARSE_GLYPH, MEDIUM_GLYPH, DENSE_GLYPH),
) -> str:
    """
    Pick the "character size" from the squared distance to the camera.
    Both tests are strict, a star exactly on a threshold gets the denser glyph.
    """
    sparse_threshold, medium_threshold = thresholds
    sparse, medium, dense = glyphs

    if distance2 > sparse_threshold:
        return sparse
    elif distance2 > medium_threshold:
        return medium
    else:
        return dense


class FrameBuffer:
    """
    Character grid plus a parallel depth grid, indexed [row, col].

    The depth grid keeps the smallest NDC depth written to each cell in the
    current frame, +inf means nothing was drawn there yet.
    """

    def __init__(
        self,
        width: int,
        height: int,
        background: str = " ",
        depth_test: bool = True,
        thresholds: tuple[float, float] = (SPARSE_THRESHOLD, MEDIUM_THRESHOLD),
        glyphs: tuple[str, str, str] = (SPARSE_GLYPH, MEDIUM_GLYPH, DENSE_GLYPH),
    ):
        self.background = background
        self.depth_test = depth_test
        self.thresholds = thresholds
        self.glyphs = glyphs

        self.width = 0
        self.height = 0
        self.resize(width, height)

    def resize(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid frame buffer size {width}x{height}")

        self.width = width
        self.height = height
        self.cells = np.full((height, width), self.background, dtype="<U1")
        self.depth = np.full((height, width), np.inf, dtype=np.float64)

    def clear(self):
        self.cells.fill(self.background)
        self.depth.fill(np.inf)

    def draw(self, original, projected) -> bool:
        """
        Rasterize one star. `original` is the world space point used for the
        glyph size, `projected` is the output of project(). Returns True when
        a cell was written.
        """

        # Clipping, w <= 0 is at or behind the camera
        if projected[3] <= 0:
            return False

        x, y, z = projected[0], projected[1], projected[2]
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
            return False

        len2 = original[0] ** 2 + original[1] ** 2 + original[2] ** 2
        glyph = select_glyph(len2, self.thresholds, self.glyphs)

        # Scale to screen cells
        x_p = (x + 1) * 0.5 * self.width
        y_p = (y + 1) * 0.5 * self.height
        if not (0 <= x_p < self.width and 0 <= y_p < self.height):
            return False

        col = math.floor(x_p)
        row = math.floor(y_p)

        if self.depth_test:
            if z >= self.depth[row, col]:
                return False
            self.depth[row, col] = z

        self.cells[row, col] = glyph
        return True

    def overlay(self, sprite, col: int, row: int):
        """Copy the opaque part of a sprite with its top left corner at (col, row)."""
        for dy, line in enumerate(sprite.lines):
            y = row + dy
            if not 0 <= y < self.height:
                continue
            for dx, glyph in enumerate(line):
                x = col + dx
                if glyph == sprite.transparent or not 0 <= x < self.width:
                    continue
                self.cells[y, x] = glyph

    def cell(self, col: int, row: int) -> str:
        return str(self.cells[row, col])

    def depth_at(self, col: int, row: int) -> float:
        return float(self.depth[row, col])

    def rows(self) -> list[str]:
        return ["".join(line) for line in self.cells]
