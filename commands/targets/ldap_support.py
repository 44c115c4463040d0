"""
Shared ldap3 imports for directory lookups.

The directory client is only required when hosts come from Active Directory,
so a missing ldap3 install must not break input-file runs.
"""

try:
    from ldap3 import Server, Connection, NTLM, SUBTREE, BASE
    from ldap3.core.exceptions import LDAPException
    from ldap3.utils.conv import escape_filter_chars
    LDAP_AVAILABLE = True
except ImportError:
    Server = None  # type: ignore
    Connection = None  # type: ignore
    NTLM = None  # type: ignore
    SUBTREE = None  # type: ignore
    BASE = None  # type: ignore
    LDAPException = None  # type: ignore
    escape_filter_chars = None  # type: ignore
    LDAP_AVAILABLE = False

__all__ = [
    "Server",
    "Connection",
    "NTLM",
    "SUBTREE",
    "BASE",
    "LDAPException",
    "escape_filter_chars",
    "LDAP_AVAILABLE",
]
