"""
SvcSeek Targets Package

Resolves the candidate host list from Active Directory or an input file.
"""

from .models import HostSource, HostSpec, ResolveResult
from .operation import TargetOperation, select_source
from .directory import DirectoryClient, DirectoryQueryError, DirectoryUnavailableError

__all__ = [
    "HostSource",
    "HostSpec",
    "ResolveResult",
    "TargetOperation",
    "select_source",
    "DirectoryClient",
    "DirectoryQueryError",
    "DirectoryUnavailableError",
]
