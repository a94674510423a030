import sys
from typing import Optional, TextIO

TITLE = (
    " ____  _  _  ____   ___  ____ \n"
    "(  _ \\/ )( \\(  _ \\ / __)(  __)\n"
    " ) __/) \\/ ( )   /( (_ \\ ) _) \n"
    "(__)  \\____/(__\\_) \\___/(____)"
)


def print_title(version: str = "v1.0", stream: Optional[TextIO] = None) -> None:
    """Print the ASCII banner.

    The banner goes to stderr so that stdout only carries the check results.
    The screen is cleared only when `stream` is a terminal.

    Args:
        version: Version label appended to the title output.
        stream: Where to write the banner. Defaults to stderr.
    """
    stream = stream or sys.stderr
    if stream.isatty():
        # ANSI escape sequence: move cursor home + clear screen.
        print("\033[H\033[J", end="", file=stream)
    print(f"{TITLE}    Checker {version}", file=stream)
