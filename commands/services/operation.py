"""
SvcSeek Service Audit Operation

Walks the resolved host list: each host is pinged first, reachable hosts are
queried for their services, and services whose logon identity satisfies the
account filter are collected into a RunReport in host order.

Unreachable hosts produce a notice that is handed to ``notice_sink`` as soon
as it is observed. Hosts that answer the ping but fail the service query are
dropped without a notice.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from shared.account_filter import AccountFilter
from shared.config import get_standard_timestamp
from shared.logging_config import get_logger

from commands.targets.models import HostSpec

from .models import HostResult, HostStatus, RunReport, ServiceEntry, ServiceRecord, UnreachableNotice
from .reachability import ReachabilityProbe
from .rpc_support import RPC_AVAILABLE
from .service_query import ServiceQuery, ServiceQueryError

logger = get_logger(__name__)


def filter_services(host_name: str, services: Iterable[ServiceEntry],
                    account_filter: AccountFilter) -> List[ServiceRecord]:
    """Keep services whose start name satisfies ``account_filter``, preserving order."""
    return [
        ServiceRecord(
            host_name=host_name,
            service_name=service.service_name,
            display_name=service.display_name,
            start_name=service.start_name
        )
        for service in services
        if account_filter.matches(service.start_name)
    ]


class ServiceOperation:
    """
    Per-host probe and service enumeration.
    """

    def __init__(self, config, output, account_filter: AccountFilter,
                 probe: Optional[ReachabilityProbe] = None,
                 query: Optional[ServiceQuery] = None,
                 notice_sink: Optional[Callable[[UnreachableNotice], None]] = None):
        self.config = config
        self.output = output
        self.account_filter = account_filter
        self.probe = probe or ReachabilityProbe(timeout=config.get_ping_timeout())
        self.query = query or ServiceQuery.from_config(config)
        self.notice_sink = notice_sink

        self.total_targets = 0
        self._sink_lock = threading.Lock()

    def execute(self, hosts: List[HostSpec]) -> RunReport:
        """
        Audit every host and return the aggregated report.

        Hosts are processed in list order. With ``services.max_concurrent_hosts``
        above 1 a bounded worker pool is used and results are merged back in
        list order, so the report is identical to a sequential run.
        """
        if not RPC_AVAILABLE:
            raise RuntimeError("impacket not available. Install with: pip install impacket")

        self.total_targets = len(hosts)
        report = RunReport()
        if not hosts:
            return report

        self.output.info(
            f"Auditing {self.total_targets} hosts for services running as {self.account_filter.describe()}"
        )

        max_workers = min(self.config.get_max_concurrent_hosts(), self.total_targets)
        if max_workers <= 1:
            for index, host in enumerate(hosts):
                report.add(self.process_host(host, index + 1))
            return report

        results_by_index: List[Optional[HostResult]] = [None] * self.total_targets
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self.process_host, host, index + 1): index
                for index, host in enumerate(hosts)
            }
            for future, index in future_to_index.items():
                results_by_index[index] = future.result()

        for result in results_by_index:
            report.add(result)
        return report

    def process_host(self, host: HostSpec, host_position: int) -> HostResult:
        """Probe one host and, when it answers, enumerate and filter its services."""
        label = f"[{host_position}/{self.total_targets}]"

        if not self.probe.is_reachable(host.name):
            notice = UnreachableNotice(
                host_name=host.name,
                timestamp=get_standard_timestamp(self.config.get_timestamp_format())
            )
            self.output.warning(f"{label} {host.name} is not online")
            self._emit_notice(notice)
            return HostResult(host=host, status=HostStatus.UNREACHABLE, notice=notice)

        try:
            services = self.query.enumerate_services(host.name)
        except ServiceQueryError as e:
            # Reachable but unqueryable hosts stay out of both report files
            logger.debug("%s", e)
            self.output.print_if_verbose(f"{label} {host.name}: service query failed ({e})")
            return HostResult(host=host, status=HostStatus.QUERY_FAILED)

        records = filter_services(host.name, services, self.account_filter)
        if records:
            self.output.success(f"{label} {host.name}: {len(records)} matching services")
            return HostResult(host=host, status=HostStatus.MATCHED, records=records)

        self.output.print_if_verbose(f"{label} {host.name}: no matching services ({len(services)} checked)")
        return HostResult(host=host, status=HostStatus.NO_MATCHES)

    def _emit_notice(self, notice: UnreachableNotice) -> None:
        if self.notice_sink is None:
            return
        with self._sink_lock:
            self.notice_sink(notice)
