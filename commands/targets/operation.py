"""
SvcSeek Target Resolution

Decides where the candidate host list comes from (Active Directory, an input
file, or an input file narrowed by a name pattern) and produces it in a
stable order. Input-file runs never touch the directory.
"""

import os
from typing import Callable, Optional

from shared.config import ConfigurationError

from . import host_filter
from .directory import DirectoryClient, DirectoryQueryError
from .models import HostSource, ResolveResult


def select_source(computer_name: Optional[str], input_file: Optional[str]) -> HostSource:
    """Map the supplied options to one of the four resolution branches."""
    if input_file and computer_name:
        return HostSource.INPUT_FILE_FILTERED
    if input_file:
        return HostSource.INPUT_FILE
    if computer_name:
        return HostSource.DIRECTORY_NAME
    return HostSource.DIRECTORY_SERVERS


class TargetOperation:
    """
    Host list resolution.

    ``check_input_file`` and ``prepare_directory`` are the startup gates (input
    file exists, directory reachable, OU exists) and ``execute`` produces the
    host list. A directory that is reachable but returns nothing is reported
    through ``ResolveResult`` rather than raised.
    """

    def __init__(self, config, output, computer_name: Optional[str] = None,
                 input_file: Optional[str] = None, organizational_unit: Optional[str] = None,
                 directory_factory: Optional[Callable[[], DirectoryClient]] = None):
        self.config = config
        self.output = output
        self.computer_name = computer_name
        self.input_file = input_file
        self.organizational_unit = organizational_unit
        self.directory_factory = directory_factory or (lambda: DirectoryClient.from_config(config))

        self.source = select_source(computer_name, input_file)
        self.directory: Optional[DirectoryClient] = None

    def check_input_file(self) -> None:
        """Raise ConfigurationError when an input file was given and does not exist."""
        if self.input_file is not None and not os.path.isfile(self.input_file):
            raise ConfigurationError(f"Input file not found: {self.input_file}")

    def prepare_directory(self) -> None:
        """Bind to the directory and check the OU; a no-op for input-file runs."""
        if not self.source.uses_directory:
            if self.organizational_unit:
                self.output.print_if_verbose(
                    f"Ignoring organizational unit {self.organizational_unit}: hosts come from {self.input_file}"
                )
            return

        self.directory = self.directory_factory()
        self.directory.connect()
        self.output.print_if_verbose(
            f"Connected to domain controller {self.directory.domain_controller} ({self.directory.base_dn})"
        )

        if self.organizational_unit and not self.directory.ou_exists(self.organizational_unit):
            self.close()
            raise ConfigurationError(f"Organizational unit not found: {self.organizational_unit}")

    def execute(self) -> ResolveResult:
        """Resolve the host list for the selected branch."""
        if self.source is HostSource.INPUT_FILE:
            hosts = host_filter.read_host_file(self.input_file)
            return self._result(hosts)

        if self.source is HostSource.INPUT_FILE_FILTERED:
            hosts = host_filter.filter_by_name(host_filter.read_host_file(self.input_file), self.computer_name)
            return self._result(hosts)

        if self.directory is None:
            self.prepare_directory()

        try:
            if self.source is HostSource.DIRECTORY_NAME:
                hosts = self.directory.find_computers_by_name(self.computer_name, self.organizational_unit)
            else:
                hosts = self.directory.find_servers(self.organizational_unit)
        except DirectoryQueryError as e:
            result = self._result([], query_failed=True)
            result.message = f"Directory query failed: {e}. {result.message}"
            return result
        finally:
            self.close()

        return self._result(hosts)

    def close(self) -> None:
        if self.directory is not None:
            self.directory.close()

    def _result(self, hosts, query_failed: bool = False) -> ResolveResult:
        result = ResolveResult(source=self.source, hosts=list(hosts), query_failed=query_failed)
        if result.no_hosts:
            result.message = self._no_hosts_message()
        return result

    def _no_hosts_message(self) -> str:
        scope = f" under {self.organizational_unit}" if self.organizational_unit else ""
        if self.source is HostSource.DIRECTORY_NAME:
            return (f"No computers matching *{self.computer_name}* were found in Active Directory{scope}. "
                    "Check the computer name pattern and connectivity to the domain controller.")
        if self.source is HostSource.INPUT_FILE:
            return f"No host names could be read from {self.input_file}. Check that the file lists one host per line."
        if self.source is HostSource.INPUT_FILE_FILTERED:
            return f"No host names in {self.input_file} match *{self.computer_name}*. Check the computer name pattern."
        return (f"No server computers were found in Active Directory{scope}. "
                "Check connectivity to the domain controller.")
