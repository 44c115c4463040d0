"""
SvcSeek Services Package

Reachability probing, remote service enumeration and account filtering for
the resolved host list.
"""

from .models import HostResult, HostStatus, RunReport, ServiceEntry, ServiceRecord, UnreachableNotice
from .operation import ServiceOperation, filter_services
from .reachability import ReachabilityProbe
from .service_query import ServiceQuery, ServiceQueryError

__all__ = [
    "HostResult",
    "HostStatus",
    "RunReport",
    "ServiceEntry",
    "ServiceRecord",
    "UnreachableNotice",
    "ServiceOperation",
    "filter_services",
    "ReachabilityProbe",
    "ServiceQuery",
    "ServiceQueryError",
]
