"""
Remote service enumeration over MS-SCMR.

Binds the service control manager on the ``svcctl`` named pipe with impacket,
lists Win32 services in every state and reads each service's configuration
for its logon identity.
"""

from typing import Dict, List, Optional

from shared.logging_config import get_logger

from .models import ServiceEntry
from .rpc_support import transport, scmr, RPC_AVAILABLE

logger = get_logger(__name__)


class ServiceQueryError(Exception):
    """The service manager of a reachable host could not be queried."""


def _strip_null(value) -> str:
    if value is None:
        return ""
    return str(value).rstrip('\x00')


def split_hashes(hashes: str):
    """Split an ``LM:NT`` (or ``:NT``) pair into impacket's lmhash/nthash arguments."""
    if not hashes:
        return '', ''
    lm_hash, _, nt_hash = hashes.partition(':')
    if not nt_hash:
        return '', lm_hash
    return lm_hash, nt_hash


class ServiceQuery:
    """Lists services with their start names on one remote host at a time."""

    def __init__(self, username: str = "", password: str = "", domain: str = "",
                 hashes: str = "", timeout: float = 30.0, port: int = 445):
        self.username = username
        self.password = password
        self.domain = domain
        self.lmhash, self.nthash = split_hashes(hashes)
        self.timeout = timeout
        self.port = port

    @classmethod
    def from_config(cls, config, overrides: Optional[Dict[str, str]] = None) -> "ServiceQuery":
        creds = config.get_credentials()
        settings = {
            'username': creds['username'],
            'password': creds['password'],
            'domain': creds['domain'] or config.get_directory_domain(),
            'hashes': creds['hashes'],
        }
        for key, value in (overrides or {}).items():
            if value:
                settings[key] = value
        return cls(timeout=config.get_rpc_timeout(), **settings)

    def enumerate_services(self, host: str) -> List[ServiceEntry]:
        """
        Return every Win32 service on ``host`` in service-manager order.

        Raises:
            ServiceQueryError: On any connection, bind, access or RPC failure
        """
        if not RPC_AVAILABLE:
            raise RuntimeError("impacket not available. Install with: pip install impacket")

        string_binding = rf'ncacn_np:{host}[\pipe\svcctl]'
        rpc_transport = transport.DCERPCTransportFactory(string_binding)
        rpc_transport.set_dport(self.port)
        rpc_transport.set_connect_timeout(self.timeout)
        rpc_transport.set_credentials(self.username, self.password, self.domain, self.lmhash, self.nthash)

        dce = rpc_transport.get_dce_rpc()
        try:
            dce.connect()
            dce.bind(scmr.MSRPC_UUID_SCMR)
            sc_handle = scmr.hROpenSCManagerW(
                dce,
                dwDesiredAccess=scmr.SC_MANAGER_CONNECT | scmr.SC_MANAGER_ENUMERATE_SERVICE
            )['lpScHandle']
            try:
                statuses = scmr.hREnumServicesStatusW(
                    dce,
                    sc_handle,
                    dwServiceType=scmr.SERVICE_WIN32_OWN_PROCESS | scmr.SERVICE_WIN32_SHARE_PROCESS
                )
                services = []
                for status in statuses:
                    entry = self._read_service(dce, sc_handle, status)
                    if entry is not None:
                        services.append(entry)
            finally:
                scmr.hRCloseServiceHandle(dce, sc_handle)
        except Exception as e:
            raise ServiceQueryError(f"Service query on {host} failed: {e}") from e
        finally:
            try:
                dce.disconnect()
            except Exception as e:
                logger.debug("Ignoring disconnect failure on %s: %s", host, e)

        logger.debug("Enumerated %d services on %s", len(services), host)
        return services

    def _read_service(self, dce, sc_handle, status) -> Optional[ServiceEntry]:
        service_name = _strip_null(status['lpServiceName'])
        display_name = _strip_null(status['lpDisplayName'])
        try:
            service_handle = scmr.hROpenServiceW(
                dce, sc_handle, service_name + '\x00',
                dwDesiredAccess=scmr.SERVICE_QUERY_CONFIG
            )['lpServiceHandle']
            try:
                config = scmr.hRQueryServiceConfigW(dce, service_handle)['lpServiceConfig']
            finally:
                scmr.hRCloseServiceHandle(dce, service_handle)
        except Exception as e:
            # A single unreadable service does not fail the host
            logger.debug("Skipping service %s: %s", service_name, e)
            return None

        return ServiceEntry(
            service_name=service_name,
            display_name=display_name,
            start_name=_strip_null(config['lpServiceStartName'])
        )
