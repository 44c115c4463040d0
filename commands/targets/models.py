from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class HostSource(Enum):
    """Where the candidate host list came from."""
    DIRECTORY_NAME = "directory_name"            # --computer-name only
    INPUT_FILE = "input_file"                    # --input-file only
    INPUT_FILE_FILTERED = "input_file_filtered"  # --input-file and --computer-name
    DIRECTORY_SERVERS = "directory_servers"      # neither: every server OS in AD

    @property
    def uses_directory(self) -> bool:
        return self in (HostSource.DIRECTORY_NAME, HostSource.DIRECTORY_SERVERS)


@dataclass(frozen=True)
class HostSpec:
    """A host to audit; directory fields are only set for AD-sourced hosts."""
    name: str
    distinguished_name: Optional[str] = None
    operating_system: Optional[str] = None


@dataclass
class ResolveResult:
    """Results from host resolution"""
    source: HostSource
    hosts: List[HostSpec] = field(default_factory=list)
    query_failed: bool = False   # directory query raised, as opposed to returning nothing
    message: str = ""

    @property
    def no_hosts(self) -> bool:
        return not self.hosts
