import math

import numpy as np


def build_projection_matrix(near: float, far: float, aspect: float, fov: float) -> np.ndarray:
    """
    Symmetric perspective frustum, column vectors (clip = M @ v).

    near/far are positive distances in front of the camera, fov is the
    vertical field of view in degrees. The w row copies z, so NDC depth
    runs from -1 at the near plane to +1 at the far plane and anything with
    clip w <= 0 is behind the camera.
    """
    if near <= 0:
        raise ValueError(f"near plane must be positive, got {near}")
    if far <= near:
        raise ValueError(f"far plane ({far}) must be farther than near plane ({near})")
    if aspect <= 0:
        raise ValueError(f"aspect ratio must be positive, got {aspect}")
    if not 0 < fov < 180:
        raise ValueError(f"field of view must be between 0 and 180 degrees, got {fov}")

    f = 1.0 / math.tan(math.radians(fov) / 2.0)

    return np.array([
        [f / aspect, 0, 0, 0],
        [0, f, 0, 0],
        [0, 0, (far + near) / (far - near), -(2 * far * near) / (far - near)],
        [0, 0, 1, 0],
    ], dtype=np.float64)


def project(m: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Transform homogeneous point(s) to NDC.

    Accepts a single (4,) point or an (N, 4) batch. The result carries
    x/w, y/w, z/w and the clip w itself in the last column.
    """
    v = np.asarray(v, dtype=np.float64)
    clip = v @ m.T

    out = np.empty_like(clip)
    # w close to 0 happens right at the camera plane; let it go to inf/nan
    with np.errstate(divide="ignore", invalid="ignore"):
        out[..., :3] = clip[..., :3] / clip[..., 3:4]
    out[..., 3] = clip[..., 3]

    return out
