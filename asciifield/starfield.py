import logging
import threading

import numpy as np

from .clock import FrameClock
from .config import Settings
from .framebuffer import FrameBuffer
from .particles import ParticlePool
from .projection import build_projection_matrix, project
from .sprite import Sprite

logger = logging.getLogger("asciifield")


class Starfield:
    """
    Everything one running animation owns: projection matrix, star pool,
    frame/depth buffers, frame clock and the optional ship.
    """

    def __init__(
        self,
        settings: Settings,
        width: int,
        height: int,
        rng: np.random.Generator | None = None,
        clock: FrameClock | None = None,
    ):
        self.settings = settings

        if rng is None:
            rng = np.random.default_rng(settings.stars.seed)

        render = settings.render
        self.buffer = FrameBuffer(
            width,
            height,
            background=render.background,
            depth_test=render.depth_test,
            thresholds=(render.sparse_threshold, render.medium_threshold),
            glyphs=(render.sparse_glyph, render.medium_glyph, render.dense_glyph),
        )

        camera = settings.camera
        self.pool = ParticlePool(camera.near, camera.far, settings.stars.spread, rng)
        self.matrix = self._build_matrix()

        self.clock = clock if clock is not None else FrameClock(settings.stars.speed)

        self.ship = None
        if settings.ship.enabled:
            self.ship = Sprite.parse(settings.ship.sprite, settings.ship.transparent)

        logger.info(
            f"[main  ] {width}x{height}, {settings.stars.count} stars, "
            f"{render.fps:g} fps, depth test {'on' if render.depth_test else 'off'}"
        )

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    @property
    def aspect(self) -> float:
        camera = self.settings.camera
        if camera.aspect is not None:
            return camera.aspect
        return self.width / (self.height * camera.cell_ratio)

    def _build_matrix(self) -> np.ndarray:
        camera = self.settings.camera
        return build_projection_matrix(camera.near, camera.far, self.aspect, camera.fov)

    def resize(self, width: int, height: int):
        if (width, height) == (self.width, self.height):
            return

        logger.info(f"[frame ] resize {self.width}x{self.height} -> {width}x{height}")
        self.buffer.resize(width, height)

        # a fixed aspect ratio does not depend on the grid
        if self.settings.camera.aspect is None:
            self.matrix = self._build_matrix()

    def render_frame(self) -> list[str]:
        self.pool.recycle()
        self.pool.replenish(self.settings.stars.count)
        self.buffer.clear()

        positions = self.pool.positions
        projected = project(self.matrix, positions)
        for original, point in zip(positions, projected):
            self.buffer.draw(original, point)

        if self.ship is not None:
            ship = self.settings.ship
            dx, dy = self.clock.wobble(ship.amplitude_x, ship.omega_x, ship.amplitude_y, ship.omega_y)
            col, row = self.ship.origin(self.width, self.height, dx, dy)
            self.buffer.overlay(self.ship, col, row)

        return self.buffer.rows()

    def step(self) -> float:
        """Advance the stars by the distance covered since the last frame."""
        step = self.clock.tick()
        # stars fly towards the camera, i.e. their distance shrinks
        self.pool.advance(-step)
        return step

    def run(
        self,
        emit,
        exit_event: threading.Event,
        sleep=None,
        resize_event: threading.Event | None = None,
        get_size=None,
        max_frames: int | None = None,
    ) -> int:
        """
        Render until exit_event is set (or max_frames were drawn).

        The full 1/fps interval is slept after every frame. That is only an
        upper bound on the frame rate, slow frames are not made up for.
        Returns the number of frames drawn.
        """
        if sleep is None:
            sleep = exit_event.wait

        interval = 1.0 / self.settings.render.fps
        frames = 0

        logger.debug("[main  ] render loop started")

        while not exit_event.is_set():
            if resize_event is not None and resize_event.is_set():
                resize_event.clear()
                if get_size is not None:
                    self.resize(*get_size())

            emit(self.render_frame())
            step = self.step()
            frames += 1

            logger.debug(f"[frame ] #{frames} stars={len(self.pool)} step={step:.4f}")

            if max_frames is not None and frames >= max_frames:
                break

            sleep(interval)

        logger.debug(f"[main  ] render loop stopped after {frames} frames")

        return frames
