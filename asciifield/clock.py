import math
import time


def calc_step(speed: float, elapsed: float) -> float:
    """Distance to travel in `elapsed` seconds at `speed` units per second."""
    return speed * elapsed


class FrameClock:
    """
    Wall time between frames. Keeps the star speed independent of the frame
    rate and drives the ship wobble from the time since start.
    """

    def __init__(self, speed: float, now=time.monotonic):
        self.speed = speed
        self._now = now
        self.start = now()
        self.previous = self.start

    def tick(self) -> float:
        now = self._now()
        elapsed = now - self.previous
        self.previous = now
        return calc_step(self.speed, elapsed)

    def elapsed(self) -> float:
        return self._now() - self.start

    def wobble(self, amplitude_x: float, omega_x: float, amplitude_y: float, omega_y: float) -> tuple[int, int]:
        t = self.elapsed()
        return (
            round(amplitude_x * math.sin(omega_x * t)),
            round(amplitude_y * math.sin(omega_y * t)),
        )
