from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from commands.targets.models import HostSpec


@dataclass(frozen=True)
class ServiceEntry:
    """One service as reported by the remote service manager."""
    service_name: str
    display_name: str
    start_name: str


@dataclass(frozen=True)
class ServiceRecord:
    """A service whose logon identity matched the account filter."""
    host_name: str
    service_name: str
    display_name: str
    start_name: str


@dataclass(frozen=True)
class UnreachableNotice:
    """A host that did not answer the liveness probe."""
    host_name: str
    timestamp: str

    def format_line(self) -> str:
        return f"Computer {self.host_name} was not online {self.timestamp}"


class HostStatus(Enum):
    MATCHED = "matched"
    NO_MATCHES = "no_matches"
    UNREACHABLE = "unreachable"
    QUERY_FAILED = "query_failed"


@dataclass
class HostResult:
    """Outcome of auditing a single host"""
    host: HostSpec
    status: HostStatus
    records: List[ServiceRecord] = field(default_factory=list)
    notice: Optional[UnreachableNotice] = None


@dataclass
class RunReport:
    """Matches and unreachable notices accumulated over a run, in host order"""
    records: List[ServiceRecord] = field(default_factory=list)
    unreachable: List[UnreachableNotice] = field(default_factory=list)
    hosts_attempted: int = 0
    hosts_reachable: int = 0
    hosts_query_failed: int = 0

    def add(self, result: HostResult) -> None:
        self.hosts_attempted += 1
        if result.status is HostStatus.UNREACHABLE:
            if result.notice is not None:
                self.unreachable.append(result.notice)
            return
        self.hosts_reachable += 1
        if result.status is HostStatus.QUERY_FAILED:
            self.hosts_query_failed += 1
            return
        self.records.extend(result.records)

    @property
    def hosts_matched(self) -> int:
        return len({record.host_name.lower() for record in self.records})
