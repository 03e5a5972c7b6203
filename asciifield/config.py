import copy
import logging
import math
from dataclasses import dataclass
from os import path

import yaml

APP_DIR = path.abspath(path.dirname(__file__))
DEFAULT_CONFIG_PATH = path.join(APP_DIR, "config", "config.default.yaml")

logger = logging.getLogger("asciifield")


@dataclass(frozen=True)
class CameraSettings:
    near: float
    far: float
    aspect: float | None  # None means derive from the terminal size
    cell_ratio: float
    fov: float


@dataclass(frozen=True)
class StarSettings:
    count: int
    speed: float
    spread: float
    seed: int | None


@dataclass(frozen=True)
class RenderSettings:
    fps: float
    depth_test: bool
    background: str
    sparse_glyph: str
    medium_glyph: str
    dense_glyph: str
    sparse_threshold: float
    medium_threshold: float


@dataclass(frozen=True)
class ShipSettings:
    enabled: bool
    transparent: str
    amplitude_x: float
    amplitude_y: float
    omega_x: float
    omega_y: float
    sprite: str


@dataclass(frozen=True)
class Settings:
    camera: CameraSettings
    stars: StarSettings
    render: RenderSettings
    ship: ShipSettings
    log_level: str | None = None
    log_file: str | None = None


def _read_yaml(config_path: str) -> dict:
    with open(config_path, "r") as file:
        data = yaml.safe_load(file)

    if data is None:
        raise ValueError(f"Config file {config_path} is empty.")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping.")

    return data


def load_config(config_path: str | None = None) -> dict:
    """
    Load the packaged defaults and merge the user config on top.

    Relative paths are resolved against the current directory, ".yaml" is
    appended when the name has no extension.

    Raises:
        ValueError: empty or malformed config file
        FileNotFoundError: user config does not exist
    """

    config_path = config_path.strip() if config_path is not None else None

    default_config = _read_yaml(DEFAULT_CONFIG_PATH)

    if not config_path:
        logger.debug("[config] using packaged defaults")
        return default_config

    if not config_path.endswith((".yaml", ".yml")):
        config_path += ".yaml"

    config_path = path.abspath(config_path)
    if not path.isfile(config_path):
        raise FileNotFoundError(
            f"Config file {config_path} not exists or is not readable."
        )

    logger.debug(f"[config] loading {config_path}")
    config = _read_yaml(config_path)

    # merge configs
    return merge_dicts(default_config, config)


def merge_dicts(default, config):
    """Recursively merges two dictionaries."""
    if not isinstance(config, dict):
        config = {}

    default = copy.deepcopy(default)

    for key, value in config.items():
        if isinstance(value, dict) and key in default:
            default[key] = merge_dicts(default.get(key, {}), value)
        else:
            default[key] = value
    return default


def apply_overrides(config: dict, overrides: dict) -> dict:
    """
    Set dotted keys ("stars.count") on a copy of the config. None values
    are skipped so unset command line options keep the file value.
    """
    config = copy.deepcopy(config)

    for dotted, value in overrides.items():
        if value is None:
            continue

        node = config
        *parents, leaf = dotted.split(".")
        for key in parents:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]
        node[leaf] = value

    return config


def _section(cfg: dict, name: str) -> dict:
    section = cfg.get(name, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Invalid '{name}' section in config, must be a mapping.")
    return section


def _number(section: dict, key: str, name: str) -> float:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Invalid '{name}.{key}' value in config, must be a number.")
    if not math.isfinite(value):
        raise ValueError(f"Invalid '{name}.{key}' value in config, must be finite.")
    return float(value)


def _integer(section: dict, key: str, name: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid '{name}.{key}' value in config, must be int.")
    return value


def _glyph(section: dict, key: str, name: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or len(value) != 1:
        raise ValueError(
            f"Invalid '{name}.{key}' value in config, must be a single character."
        )
    return value


def build_settings(cfg) -> Settings:
    """
    Validate the merged config dictionary.

    Raises:
        ValueError: missing or invalid value, the message names the key
    """

    if not isinstance(cfg, dict):
        raise ValueError("Invalid configuration.")

    camera = _section(cfg, "camera")
    near = _number(camera, "near", "camera")
    far = _number(camera, "far", "camera")
    if near <= 0:
        raise ValueError("Invalid 'camera.near' value in config, must be > 0.")
    if far <= near:
        raise ValueError(
            "Invalid 'camera.far' value in config, must be greater than 'camera.near'."
        )

    if camera.get("aspect") == "auto":
        aspect = None
    else:
        aspect = _number(camera, "aspect", "camera")
        if aspect <= 0:
            raise ValueError("Invalid 'camera.aspect' value in config, must be > 0.")

    cell_ratio = _number(camera, "cell_ratio", "camera")
    if cell_ratio <= 0:
        raise ValueError("Invalid 'camera.cell_ratio' value in config, must be > 0.")

    fov = _number(camera, "fov", "camera")
    if not 0 < fov < 180:
        raise ValueError(
            "Invalid 'camera.fov' value in config, must be between 0 and 180 degrees."
        )

    stars = _section(cfg, "stars")
    count = _integer(stars, "count", "stars")
    if count < 0:
        raise ValueError("Invalid 'stars.count' value in config, must be >= 0.")
    spread = _number(stars, "spread", "stars")
    if spread <= 0:
        raise ValueError("Invalid 'stars.spread' value in config, must be > 0.")
    seed = stars.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError("Invalid 'stars.seed' value in config, must be int or null.")

    render = _section(cfg, "render")
    fps = _number(render, "fps", "render")
    if fps <= 0:
        raise ValueError("Invalid 'render.fps' value in config, must be > 0.")
    depth_test = render.get("depth_test")
    if not isinstance(depth_test, bool):
        raise ValueError("Invalid 'render.depth_test' value in config, must be bool.")

    glyphs = _section(render, "glyphs")
    thresholds = _section(render, "thresholds")
    sparse_threshold = _number(thresholds, "sparse", "render.thresholds")
    medium_threshold = _number(thresholds, "medium", "render.thresholds")
    if medium_threshold > sparse_threshold:
        raise ValueError(
            "Invalid 'render.thresholds.medium' value in config, "
            "must not exceed 'render.thresholds.sparse'."
        )

    ship = _section(cfg, "ship")
    enabled = ship.get("enabled", False)
    if not isinstance(enabled, bool):
        raise ValueError("Invalid 'ship.enabled' value in config, must be bool.")
    sprite = ship.get("sprite") or ""
    if not isinstance(sprite, str):
        raise ValueError("Invalid 'ship.sprite' value in config, must be text.")
    if enabled and not sprite.strip():
        raise ValueError("Invalid 'ship.sprite' value in config, sprite is empty.")

    log = _section(cfg, "log")

    return Settings(
        camera=CameraSettings(
            near=near, far=far, aspect=aspect, cell_ratio=cell_ratio, fov=fov
        ),
        stars=StarSettings(
            count=count,
            speed=_number(stars, "speed", "stars"),
            spread=spread,
            seed=seed,
        ),
        render=RenderSettings(
            fps=fps,
            depth_test=depth_test,
            background=_glyph(render, "background", "render"),
            sparse_glyph=_glyph(glyphs, "sparse", "render.glyphs"),
            medium_glyph=_glyph(glyphs, "medium", "render.glyphs"),
            dense_glyph=_glyph(glyphs, "dense", "render.glyphs"),
            sparse_threshold=sparse_threshold,
            medium_threshold=medium_threshold,
        ),
        ship=ShipSettings(
            enabled=enabled,
            transparent=_glyph(ship, "transparent", "ship"),
            amplitude_x=_number(ship, "amplitude_x", "ship"),
            amplitude_y=_number(ship, "amplitude_y", "ship"),
            omega_x=_number(ship, "omega_x", "ship"),
            omega_y=_number(ship, "omega_y", "ship"),
            sprite=sprite,
        ),
        log_level=log.get("level"),
        log_file=log.get("file"),
    )
