"""Background thread that watches the keyboard for the exit keys.

The listener shares exactly one thing with the dashboard loop: the
``threading.Event`` it sets when ``Esc`` or ``q`` is pressed.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TextIO

from console_log import LOG_PREFIX_DEBUG, log

ESCAPE = "\x1b"
EXIT_KEYS = frozenset({ESCAPE, "q", "Q"})
# Bytes of an escape sequence (arrow keys etc.) arrive well within this.
ESCAPE_SEQUENCE_WAIT = 0.03

KeyReader = Callable[[float], Optional[str]]


def is_exit_key(key: str | None) -> bool:
    return key in EXIT_KEYS


@contextmanager
def cbreak_mode(stream: TextIO) -> Iterator[None]:
    """Deliver keys one at a time without echo; Ctrl+C keeps working."""

    if os.name == "nt" or not stream.isatty():
        yield
        return

    import termios
    import tty

    fd = stream.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _read_key_posix(stream: TextIO, timeout: float) -> Optional[str]:
    import select

    fd = stream.fileno()
    if not select.select([fd], [], [], timeout)[0]:
        return None
    key = os.read(fd, 1).decode("utf-8", errors="ignore")
    if key == ESCAPE and select.select([fd], [], [], ESCAPE_SEQUENCE_WAIT)[0]:
        # A lone Esc is the exit key; Esc plus more bytes is a sequence.
        os.read(fd, 32)
        return None
    return key or None


def _read_key_windows(timeout: float) -> Optional[str]:
    import msvcrt

    deadline = time.monotonic() + timeout
    while not msvcrt.kbhit():
        if time.monotonic() >= deadline:
            return None
        time.sleep(0.02)
    key = msvcrt.getwch()
    if key in ("\x00", "\xe0"):
        # Function and arrow keys arrive as a two-character pair.
        msvcrt.getwch()
        return None
    return key


def make_key_reader(stream: TextIO) -> KeyReader:
    if os.name == "nt":
        return _read_key_windows
    return lambda timeout: _read_key_posix(stream, timeout)


class KeyListener(threading.Thread):
    """Set ``stop_event`` once an exit key is read."""

    def __init__(
        self,
        stop_event: threading.Event,
        *,
        read_key: KeyReader | None = None,
        stream: TextIO | None = None,
        poll_interval: float = 0.1,
    ) -> None:
        super().__init__(name="key-listener", daemon=True)
        self.stop_event = stop_event
        self.stream = stream if stream is not None else sys.stdin
        self._owns_terminal = read_key is None
        self._read_key = read_key if read_key is not None else make_key_reader(self.stream)
        self.poll_interval = poll_interval
        self.exit_key: str | None = None

    def run(self) -> None:
        if self._owns_terminal:
            with cbreak_mode(self.stream):
                self._listen()
        else:
            self._listen()

    def _listen(self) -> None:
        # Polling with a timeout lets the thread notice when the loop ends.
        while not self.stop_event.is_set():
            key = self._read_key(self.poll_interval)
            if is_exit_key(key):
                self.exit_key = key
                log(LOG_PREFIX_DEBUG, f"Exit key {key!r} pressed.")
                self.stop_event.set()
                return
