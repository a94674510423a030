import sys
import time
from itertools import cycle
from shutil import get_terminal_size
from threading import Thread
from typing import Optional, TextIO, Type


class Loader:
    """Terminal spinner implemented as a context manager.

    Example:
        >>> with Loader("Waiting for the purge to propagate..."):
        ...     time.sleep(5)

    Notes:
        - Frames are written to stderr by default so stdout stays parseable.
        - Nothing is drawn when the stream is not a terminal.
        - The elapsed time in seconds is shown next to the spinner.
    """

    def __init__(self, desc: str = "Loading...", timeout: float = 0.1, stream: Optional[TextIO] = None) -> None:
        """Create a new loader.

        Args:
            desc: Text displayed before the spinner.
            timeout: Delay (in seconds) between spinner frames.
            stream: Where the spinner is drawn. Defaults to stderr.
        """
        self.desc = desc
        self.timeout = timeout
        self.stream = stream or sys.stderr

        self.steps = ["⢿", "⣻", "⣽", "⣾", "⣷", "⣯", "⣟", "⡿"]
        self.done = False
        self.started_at: Optional[float] = None
        self._thread = Thread(target=self._animate, daemon=True)

    def start(self) -> "Loader":
        """Start the spinner thread.

        Returns:
            Self, allowing fluent usage.
        """
        self.started_at = time.monotonic()
        if self.stream.isatty():
            self._thread.start()
        return self

    def elapsed(self) -> float:
        """Seconds since :meth:`start`, or 0 if never started."""
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def _animate(self) -> None:
        for c in cycle(self.steps):
            if self.done:
                break
            print(f"\r{self.desc} {c} {self.elapsed():.0f}s", flush=True, end="", file=self.stream)
            time.sleep(self.timeout)

    def __enter__(self) -> "Loader":
        return self.start()

    def stop(self) -> None:
        """Stop the spinner and clear the current terminal line."""
        self.done = True
        if self._thread.is_alive():
            self._thread.join()
            cols = get_terminal_size((80, 20)).columns
            print("\r" + (" " * cols) + "\r", end="", flush=True, file=self.stream)

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        tb,
    ) -> None:
        self.stop()
