import logging

import numpy as np

logger = logging.getLogger("asciifield")


class ParticlePool:
    """
    The stars, one homogeneous point (x, y, z, 1) per row.

    z is the distance in front of the camera and is the only coordinate
    that changes once a star exists. Rows are removed with a boolean mask,
    which keeps the order of the survivors.
    """

    def __init__(self, near: float, far: float, spread: float, rng: np.random.Generator | None = None):
        if far <= near:
            raise ValueError(f"far plane ({far}) must be farther than near plane ({near})")

        self.near = near
        self.far = far
        self.spread = spread
        self.rng = rng if rng is not None else np.random.default_rng()

        # Only the very first replenish scatters stars over the whole depth
        # range, every later one spawns them at the far plane.
        self.seed_mode = True

        self._stars = np.empty((0, 4), dtype=np.float64)

    def __len__(self):
        return len(self._stars)

    def __iter__(self):
        return iter(self._stars)

    @property
    def positions(self) -> np.ndarray:
        view = self._stars.view()
        view.flags.writeable = False
        return view

    def recycle(self) -> int:
        """Drop every star whose depth left [near, far]. Returns the count."""
        z = self._stars[:, 2]
        alive = (z >= self.near) & (z <= self.far)

        removed = len(self._stars) - int(np.count_nonzero(alive))
        if removed:
            self._stars = self._stars[alive]
            logger.debug(f"[stars ] recycled {removed} stars")

        return removed

    def replenish(self, target_count: int) -> int:
        """Top the pool up to target_count stars. Returns the count created."""
        missing = max(target_count - len(self._stars), 0)

        if missing:
            fresh = np.empty((missing, 4), dtype=np.float64)
            fresh[:, :2] = (self.rng.random((missing, 2)) * 2 - 1) * self.spread

            if self.seed_mode:
                fresh[:, 2] = self.near + self.rng.random(missing) * (self.far - self.near)
                logger.debug(f"[stars ] seeded {missing} stars")
            else:
                fresh[:, 2] = self.far

            fresh[:, 3] = 1.0
            self._stars = np.concatenate((self._stars, fresh))

        self.seed_mode = False

        return missing

    def advance(self, step: float):
        """Move every star along the depth axis by step."""
        self._stars[:, 2] += step

    def add(self, x: float, y: float, z: float):
        """Insert a single star as given, mostly useful for tests and demos."""
        self._stars = np.concatenate(
            (self._stars, np.array([[x, y, z, 1.0]], dtype=np.float64))
        )
