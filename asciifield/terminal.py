import logging
import shutil
import signal
import sys
import threading

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?12l\033[?25h"
CURSOR_HOME = "\033[H"
CLEAR_SCREEN = "\033[2J"

FALLBACK_SIZE = (80, 24)

exit_event = threading.Event()
resize_event = threading.Event()
logger = logging.getLogger("asciifield")


def get_size(stream=None) -> tuple[int, int]:
    """Terminal (columns, lines), 80x24 when the output is not a terminal."""
    stream = stream if stream is not None else sys.stdout

    if not stream.isatty():
        return FALLBACK_SIZE

    size = shutil.get_terminal_size(FALLBACK_SIZE)
    return max(size.columns, 1), max(size.lines, 1)


def handle_signal(signum, frame):
    logger.info(f"[term  ] Signal {signum} received")
    exit_event.set()


def handle_resize(signum, frame):
    resize_event.set()


def install_signal_handlers():
    signal.signal(signal.SIGINT, handle_signal)
    if sys.platform != "win32":
        signal.signal(signal.SIGTERM, handle_signal)
        signal.signal(signal.SIGHUP, handle_signal)
        signal.signal(signal.SIGWINCH, handle_resize)


class FrameWriter:
    """
    Writes frames in place: jump to the top left corner and overwrite every
    cell instead of clearing, which avoids flicker.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout

    def __enter__(self):
        self.stream.write(HIDE_CURSOR + CLEAR_SCREEN)
        self.stream.flush()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False

    def restore(self):
        self.stream.write(SHOW_CURSOR + "\n")
        self.stream.flush()

    def __call__(self, rows: list[str]):
        # No newline after the last row, it would scroll the screen
        self.stream.write(CURSOR_HOME + "\n".join(rows))
        self.stream.flush()
