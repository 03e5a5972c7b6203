import argparse
import logging
import sys
import traceback

from . import __version__, terminal
from .config import apply_overrides, build_settings, load_config
from .starfield import Starfield

logger = logging.getLogger("asciifield")


def init_log(log_level: str | None = None, log_file: str | None = None) -> logging.Logger:
    choices = {
        "error": logging.ERROR,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }

    log_level = log_level.lower() if log_level is not None else None
    if log_level is not None and log_level not in choices:
        raise ValueError(
            f"Invalid log level. Available options: {', '.join(choices.keys())}"
        )

    logger = logging.getLogger("asciifield")
    logger.handlers.clear()
    logger.propagate = False

    if log_level is None:
        logger.addHandler(logging.NullHandler())
        return logger

    logger.setLevel(logging.DEBUG)

    # stdout carries the frames, so log to stderr or a file
    if log_file:
        log_handler = logging.FileHandler(log_file)
    else:
        log_handler = logging.StreamHandler(sys.stderr)
    log_handler.setLevel(choices[log_level])
    log_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname).1s] %(message)s",
            datefmt="%y-%m-%d %H:%M:%S",
        )
    )

    logger.addHandler(log_handler)

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asciifield",
        description="Fly through an ASCII starfield in your terminal.",
    )

    parser.add_argument(
        "--config",
        help="Configuration file merged over the packaged defaults",
        metavar="[path]",
    )
    parser.add_argument("--fps", help="Target frame rate", type=float, metavar="[n]")
    parser.add_argument("--stars", help="Number of stars", type=int, metavar="[n]")
    parser.add_argument(
        "--speed", help="Star speed in units per second", type=float, metavar="[units]"
    )
    parser.add_argument(
        "--fov", help="Vertical field of view", type=float, metavar="[degrees]"
    )
    parser.add_argument("--near", help="Near clip plane", type=float, metavar="[n]")
    parser.add_argument("--far", help="Far clip plane", type=float, metavar="[n]")
    parser.add_argument("--seed", help="Random seed", type=int, metavar="[n]")
    parser.add_argument(
        "--ship",
        help="Draw the ship overlay",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--no-depth-test",
        help="Last star drawn to a cell wins instead of the nearest",
        dest="depth_test",
        action="store_false",
        default=None,
    )
    parser.add_argument("--log-level", help="Log level (default: off)")
    parser.add_argument("--log-file", help="Log to a file instead of stderr", metavar="[path]")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def settings_from_args(args):
    cfg = load_config(args.config)
    cfg = apply_overrides(
        cfg,
        {
            "camera.near": args.near,
            "camera.far": args.far,
            "camera.fov": args.fov,
            "stars.count": args.stars,
            "stars.speed": args.speed,
            "stars.seed": args.seed,
            "render.fps": args.fps,
            "render.depth_test": args.depth_test,
            "ship.enabled": args.ship,
            "log.level": args.log_level,
            "log.file": args.log_file,
        },
    )
    return build_settings(cfg)


def run_app(args) -> int:
    try:
        settings = settings_from_args(args)
        init_log(settings.log_level, settings.log_file)
    except (ValueError, OSError) as e:
        # logging is not set up yet
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    terminal.install_signal_handlers()

    writer = terminal.FrameWriter()
    try:
        with writer:
            starfield = Starfield(settings, *terminal.get_size())
            starfield.run(
                writer,
                terminal.exit_event,
                resize_event=terminal.resize_event,
                get_size=terminal.get_size,
            )
    except MemoryError:
        # nothing sensible to degrade to
        logger.critical("[main  ] out of memory")
        print("ERROR: out of memory", file=sys.stderr)
        return 1

    logger.info("[main  ] stopped")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return run_app(args)
    except KeyboardInterrupt:
        terminal.exit_event.set()
        return 0
    except Exception:
        print(traceback.format_exc(), file=sys.stderr)
        return 1
