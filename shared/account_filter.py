"""
Service account filter.

A run matches service logon identities in exactly one of two modes: substring
containment or exact equality. Both comparisons are case-insensitive, the
same way the Windows service manager compares account names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FilterMode(Enum):
    SUBSTRING = "substring"
    EXACT = "exact"


@dataclass(frozen=True)
class AccountFilter:
    """Tagged filter value; build it with ``substring``, ``exact`` or ``from_options``."""

    mode: FilterMode
    value: str

    @classmethod
    def substring(cls, pattern: str) -> "AccountFilter":
        return cls(FilterMode.SUBSTRING, _require_value(pattern, "account name"))

    @classmethod
    def exact(cls, value: str) -> "AccountFilter":
        return cls(FilterMode.EXACT, _require_value(value, "literal account name"))

    @classmethod
    def from_options(cls, account_name: Optional[str] = None,
                     literal_account_name: Optional[str] = None) -> "AccountFilter":
        """
        Build the filter from the two mutually exclusive CLI options.

        Raises:
            ValueError: If both or neither option is supplied, or the value is blank
        """
        if account_name is not None and literal_account_name is not None:
            raise ValueError("Specify either an account name or a literal account name, not both")
        if account_name is not None:
            return cls.substring(account_name)
        if literal_account_name is not None:
            return cls.exact(literal_account_name)
        raise ValueError("An account name or a literal account name is required")

    def matches(self, start_name: Optional[str]) -> bool:
        """Return True when a service logon identity satisfies this filter."""
        if not start_name:
            return False
        candidate = start_name.casefold()
        if self.mode is FilterMode.SUBSTRING:
            return self.value.casefold() in candidate
        return self.value.casefold() == candidate

    def describe(self) -> str:
        if self.mode is FilterMode.SUBSTRING:
            return f"*{self.value}*"
        return f"'{self.value}'"


def _require_value(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"The {label} cannot be empty")
    return value
