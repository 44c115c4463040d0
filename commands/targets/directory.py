"""
Active Directory lookups for candidate hosts.

Thin wrapper around an ldap3 connection: NTLM bind, root DSE lookup for the
default naming context, paged computer searches and a BASE-scope existence
check for organizational units.
"""

from typing import Dict, List, Optional

from shared.config import ConfigurationError
from shared.logging_config import get_logger

from .ldap_support import (
    Server, Connection, NTLM, SUBTREE, BASE,
    LDAPException, escape_filter_chars, LDAP_AVAILABLE,
)
from .models import HostSpec

logger = get_logger(__name__)

PAGED_RESULTS_OID = '1.2.840.113556.1.4.319'
EMPTY_LM_HASH = 'aad3b435b51404eeaad3b435b51404ee'
COMPUTER_ATTRIBUTES = ['name', 'dNSHostName', 'operatingSystem', 'distinguishedName']


class DirectoryUnavailableError(ConfigurationError):
    """Directory lookups are required but cannot be performed."""


class DirectoryQueryError(Exception):
    """A computer search failed after a successful bind."""


def build_name_filter(pattern: str) -> str:
    """LDAP filter for computers whose DNS host name contains ``pattern``."""
    return f"(&(objectCategory=computer)(dNSHostName=*{escape_filter_chars(pattern)}*))"


def build_server_filter() -> str:
    """LDAP filter for computers running a server operating system."""
    return "(&(objectCategory=computer)(operatingSystem=*server*))"


def _first_value(attributes: Dict, key: str) -> Optional[str]:
    value = attributes.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class DirectoryClient:
    """
    Computer lookups against a domain controller.

    Args:
        domain_controller: Host name or address of the domain controller
        domain: NetBIOS or DNS domain used for the NTLM bind
        username: Account used for the bind; anonymous bind when empty
        password: Password, or empty when ``hashes`` is used
        hashes: ``LM:NT`` or ``:NT`` hash pair accepted by ldap3's NTLM bind
        use_ssl: Bind over LDAPS
        port: LDAP port
        page_size: Simple paged results page size
        connect_timeout: Seconds to wait for the TCP connection
    """

    def __init__(self, domain_controller: str, domain: str = "", username: str = "",
                 password: str = "", hashes: str = "", use_ssl: bool = False,
                 port: int = 389, page_size: int = 500, connect_timeout: float = 10.0):
        self.domain_controller = domain_controller
        self.domain = domain
        self.username = username
        self.password = password
        self.hashes = hashes
        self.use_ssl = use_ssl
        self.port = port
        self.page_size = page_size
        self.connect_timeout = connect_timeout

        self.conn = None
        self.base_dn = ""

    @classmethod
    def from_config(cls, config, overrides: Optional[Dict[str, object]] = None) -> "DirectoryClient":
        """Build a client from configuration, letting non-empty CLI values win."""
        creds = config.get_credentials()
        settings = {
            'domain_controller': config.get_domain_controller(),
            'domain': creds['domain'] or config.get_directory_domain(),
            'username': creds['username'],
            'password': creds['password'],
            'hashes': creds['hashes'],
            'use_ssl': config.get_directory_use_ssl(),
            'port': config.get_directory_port(),
            'page_size': config.get_directory_page_size(),
            'connect_timeout': config.get_directory_connect_timeout(),
        }
        for key, value in (overrides or {}).items():
            if value:
                settings[key] = value
        if settings['use_ssl'] and settings['port'] == 389:
            settings['port'] = 636
        return cls(**settings)

    # --- Lifecycle -----------------------------------------------------

    def connect(self) -> None:
        """
        Bind to the domain controller and read the default naming context.

        Raises:
            DirectoryUnavailableError: If ldap3 is missing, no domain controller
                is configured, or the bind fails
        """
        if not LDAP_AVAILABLE:
            raise DirectoryUnavailableError(
                "Directory lookups require ldap3. Install with: pip install ldap3, "
                "or supply hosts with --input-file"
            )
        if not self.domain_controller:
            raise DirectoryUnavailableError(
                "No domain controller configured. Use --dc or set directory.domain_controller, "
                "or supply hosts with --input-file"
            )

        server = Server(
            self.domain_controller,
            port=self.port,
            use_ssl=self.use_ssl,
            get_info='DSA',
            connect_timeout=self.connect_timeout
        )

        try:
            if self.username:
                self.conn = Connection(
                    server,
                    user=self._bind_user(),
                    password=self._bind_secret(),
                    authentication=NTLM,
                    auto_bind=True
                )
            else:
                logger.debug("No username configured, using anonymous bind")
                self.conn = Connection(server, auto_bind=True)
        except LDAPException as e:
            raise DirectoryUnavailableError(
                f"Unable to bind to domain controller {self.domain_controller}: {e}"
            ) from e

        self.base_dn = self._default_naming_context(server)
        logger.debug("Bound to %s, base DN %s", self.domain_controller, self.base_dn)
        if not self.base_dn:
            raise DirectoryUnavailableError(
                f"Domain controller {self.domain_controller} did not report a default naming context"
            )

    def close(self) -> None:
        try:
            if self.conn is not None:
                self.conn.unbind()
        except LDAPException as e:
            logger.debug("Ignoring unbind failure: %s", e)
        finally:
            self.conn = None

    def _bind_user(self) -> str:
        if '\\' in self.username or '@' in self.username or not self.domain:
            return self.username
        return f"{self.domain}\\{self.username}"

    def _bind_secret(self) -> str:
        if self.password or not self.hashes:
            return self.password
        lm_hash, _, nt_hash = self.hashes.partition(':')
        if not nt_hash:
            nt_hash, lm_hash = lm_hash, ''
        return f"{lm_hash or EMPTY_LM_HASH}:{nt_hash}"

    @staticmethod
    def _default_naming_context(server) -> str:
        info = getattr(server, 'info', None)
        other = getattr(info, 'other', None) or {}
        values = other.get('defaultNamingContext') or []
        if values:
            return str(values[0])
        contexts = getattr(info, 'naming_contexts', None) or []
        return str(contexts[0]) if contexts else ""

    def _require_conn(self):
        if self.conn is None:
            raise RuntimeError("Directory client is not connected")
        return self.conn

    # --- Queries -------------------------------------------------------

    def ou_exists(self, distinguished_name: str) -> bool:
        """Return True when ``distinguished_name`` names an existing directory object."""
        conn = self._require_conn()
        try:
            found = conn.search(
                search_base=distinguished_name,
                search_filter='(objectClass=*)',
                search_scope=BASE,
                attributes=['distinguishedName']
            )
        except LDAPException as e:
            logger.debug("OU lookup for %s failed: %s", distinguished_name, e)
            return False
        return bool(found) and bool(conn.response) and any(
            entry.get('type') == 'searchResEntry' for entry in conn.response
        )

    def search_computers(self, search_filter: str, search_base: Optional[str] = None) -> List[HostSpec]:
        """
        Run a paged computer search and return hosts sorted by name.

        Raises:
            DirectoryQueryError: If the search fails
        """
        conn = self._require_conn()
        base = search_base or self.base_dn
        entries: List[Dict] = []
        cookie = None

        try:
            while True:
                ok = conn.search(
                    search_base=base,
                    search_filter=search_filter,
                    search_scope=SUBTREE,
                    attributes=COMPUTER_ATTRIBUTES,
                    paged_size=self.page_size,
                    paged_cookie=cookie
                )
                if not ok and conn.result.get('result') not in (0, None):
                    raise DirectoryQueryError(
                        f"Search under {base} failed: {conn.result.get('description', 'unknown error')}"
                    )
                entries.extend(e for e in (conn.response or []) if e.get('type') == 'searchResEntry')

                cookie = (conn.result.get('controls', {})
                          .get(PAGED_RESULTS_OID, {})
                          .get('value', {})
                          .get('cookie'))
                if not cookie:
                    break
        except LDAPException as e:
            raise DirectoryQueryError(f"Search under {base} failed: {e}") from e

        hosts = []
        for entry in entries:
            attributes = entry.get('attributes', {})
            name = _first_value(attributes, 'name')
            dns_name = _first_value(attributes, 'dNSHostName')
            if not (dns_name or name):
                continue
            hosts.append((name or dns_name, HostSpec(
                name=dns_name or name,
                distinguished_name=entry.get('dn') or _first_value(attributes, 'distinguishedName'),
                operating_system=_first_value(attributes, 'operatingSystem')
            )))

        hosts.sort(key=lambda item: item[0].lower())
        logger.debug("Search %s under %s returned %d hosts", search_filter, base, len(hosts))
        return [host for _, host in hosts]

    def find_computers_by_name(self, pattern: str, search_base: Optional[str] = None) -> List[HostSpec]:
        return self.search_computers(build_name_filter(pattern), search_base)

    def find_servers(self, search_base: Optional[str] = None) -> List[HostSpec]:
        return self.search_computers(build_server_filter(), search_base)
