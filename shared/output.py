"""
SvcSeek Output Management

Console output helpers with color, quiet and verbose handling. All printing
goes through a single lock so concurrent host workers never interleave lines.
"""

import threading

# ANSI color codes
GREEN = '\033[92m'
RED = '\033[91m'
YELLOW = '\033[93m'
CYAN = '\033[96m'
BLUE = '\033[94m'
BOLD = '\033[1m'
RESET = '\033[0m'


class SvcSeekOutput:
    """Output manager shared by the workflow and all operations."""

    def __init__(self, config, quiet=False, verbose=False, no_colors=False):
        self.config = config
        self.quiet = quiet
        self.verbose = verbose
        self.no_colors = no_colors or not self._colors_enabled(config)
        self._print_lock = threading.Lock()

        if self.no_colors:
            self.GREEN = ''
            self.RED = ''
            self.YELLOW = ''
            self.CYAN = ''
            self.BLUE = ''
            self.BOLD = ''
            self.RESET = ''
        else:
            self.GREEN = GREEN
            self.RED = RED
            self.YELLOW = YELLOW
            self.CYAN = CYAN
            self.BLUE = BLUE
            self.BOLD = BOLD
            self.RESET = RESET

    @staticmethod
    def _colors_enabled(config) -> bool:
        getter = getattr(config, 'get_colors_enabled', None)
        if getter is None:
            return True
        return bool(getter())

    def _emit(self, message: str) -> None:
        with self._print_lock:
            print(message, flush=True)

    def print_if_not_quiet(self, message: str) -> None:
        if not self.quiet:
            self._emit(message)

    def print_if_verbose(self, message: str) -> None:
        if self.verbose and not self.quiet:
            self._emit(f"{self.BLUE}  {message}{self.RESET}")

    def header(self, message: str) -> None:
        if not self.quiet:
            rule = "=" * max(len(message), 40)
            self._emit(f"\n{self.BOLD}{self.CYAN}{rule}\n{message}\n{rule}{self.RESET}")

    def subheader(self, message: str) -> None:
        if not self.quiet:
            self._emit(f"\n{self.BOLD}{message}{self.RESET}\n{'-' * len(message)}")

    def info(self, message: str) -> None:
        if not self.quiet:
            self._emit(f"{self.CYAN}ℹ {message}{self.RESET}")

    def success(self, message: str) -> None:
        if not self.quiet:
            self._emit(f"{self.GREEN}✓ {message}{self.RESET}")

    def warning(self, message: str) -> None:
        if not self.quiet:
            self._emit(f"{self.YELLOW}⚠ {message}{self.RESET}")

    def error(self, message: str) -> None:
        # Errors are shown even in quiet mode
        self._emit(f"{self.RED}✗ {message}{self.RESET}")


def create_output_manager(config, quiet=False, verbose=False, no_colors=False) -> SvcSeekOutput:
    """Factory function for the output manager."""
    return SvcSeekOutput(config, quiet=quiet, verbose=verbose, no_colors=no_colors)
