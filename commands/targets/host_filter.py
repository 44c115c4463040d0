from typing import List

from .models import HostSpec


def read_host_file(path: str) -> List[HostSpec]:
    """
    Read one host identifier per line.

    Lines are taken verbatim apart from the line terminator. Blank lines and
    duplicates are kept, so a file of N lines yields N hosts; a blank entry
    simply fails the liveness probe later on.
    """
    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        return [HostSpec(name=line.rstrip('\r\n')) for line in f]


def filter_by_name(hosts: List[HostSpec], pattern: str) -> List[HostSpec]:
    """Keep hosts whose name contains ``pattern``, case-insensitively, in input order."""
    needle = pattern.casefold()
    return [host for host in hosts if needle in host.name.casefold()]
