from dataclasses import dataclass


@dataclass(frozen=True)
class Sprite:
    """A fixed bitmap of glyphs, `transparent` marks cells that are not drawn."""

    lines: tuple[str, ...]
    transparent: str

    @classmethod
    def parse(cls, text: str, transparent: str) -> "Sprite":
        # Leading/trailing blank lines come from YAML block scalars
        lines = text.splitlines()
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()

        width = max((len(line) for line in lines), default=0)
        # Pad ragged rows so the sprite stays a rectangle
        return cls(tuple(line.ljust(width, transparent) for line in lines), transparent)

    @property
    def width(self) -> int:
        return len(self.lines[0]) if self.lines else 0

    @property
    def height(self) -> int:
        return len(self.lines)

    def origin(self, grid_width: int, grid_height: int, dx: int = 0, dy: int = 0) -> tuple[int, int]:
        """Top left cell that centers the sprite on the grid, shifted by (dx, dy)."""
        return (
            (grid_width - self.width) // 2 + dx,
            (grid_height - self.height) // 2 + dy,
        )
