import platform
import subprocess
from typing import List, Optional

from shared.logging_config import get_logger

logger = get_logger(__name__)


class ReachabilityProbe:
    """Single ICMP echo through the system ``ping`` command."""

    def __init__(self, timeout: float = 2.0, system: Optional[str] = None):
        self.timeout = timeout
        self.system = (system or platform.system()).lower()

    def build_command(self, host: str) -> List[str]:
        if self.system == "windows":
            return ["ping", "-n", "1", "-w", str(max(1, int(self.timeout * 1000))), host]
        return ["ping", "-c", "1", "-W", str(max(1, int(self.timeout))), host]

    def is_reachable(self, host: str) -> bool:
        """Return True when the host answers one echo request within the timeout."""
        if not host or not host.strip() or self.timeout <= 0:
            return False
        # ping would parse a leading dash as an option
        if host.startswith('-'):
            logger.debug("Refusing to ping %r: looks like a command line option", host)
            return False
        cmd = self.build_command(host)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=max(1.0, self.timeout + 0.5),
                stdin=subprocess.DEVNULL,
                check=False
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as e:
            logger.debug("Ping of %s failed to run: %s", host, e)
            return False
        if result.returncode != 0:
            return False
        # Windows ping exits 0 on "Destination host unreachable" replies
        if self.system == "windows":
            return "ttl=" in (result.stdout or "").lower()
        return True
