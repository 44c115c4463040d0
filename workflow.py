"""
SvcSeek Audit Workflow

Orchestrates the complete resolve → probe/enumerate → report pipeline.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from commands.report import ReportWriter
from commands.services import ReachabilityProbe, ServiceOperation, ServiceQuery
from commands.targets import DirectoryClient, TargetOperation
from shared.account_filter import AccountFilter
from shared.config import ConfigurationError, load_config
from shared.output import create_output_manager


@dataclass
class AuditSummary:
    """Final workflow summary for rollup display"""
    filter_description: str
    host_source: str
    hosts_resolved: int
    hosts_attempted: int
    hosts_reachable: int
    hosts_unreachable: int
    hosts_query_failed: int
    hosts_matched: int
    matches: int
    results_path: str
    errors_path: str
    started_at: datetime
    finished_at: datetime


class NoHostsError(Exception):
    """Host resolution produced an empty list; the message names the cause."""

    def __init__(self, message: str, query_failed: bool = False):
        super().__init__(message)
        self.query_failed = query_failed


def validate_output_folder(folder: Optional[str]) -> str:
    """
    Resolve the report folder, defaulting to the current working directory.

    Raises:
        ConfigurationError: If the path is a file or does not exist
    """
    path = os.path.abspath(folder or os.getcwd())
    if os.path.isfile(path):
        raise ConfigurationError(f"Output folder {path} is a file, not a directory")
    if not os.path.isdir(path):
        raise ConfigurationError(f"Output folder {path} does not exist")
    return path


class AuditWorkflow:
    """
    Service account audit orchestrator.

    Startup gates run before any host is contacted; once processing starts the
    run always completes and writes its results file.
    """

    def __init__(self, config, output, account_filter: AccountFilter, targets: TargetOperation,
                 folder: Optional[str] = None, query: Optional[ServiceQuery] = None,
                 probe: Optional[ReachabilityProbe] = None):
        """
        Initialize the audit workflow.

        Args:
            config: SvcSeekConfig instance
            output: SvcSeekOutput instance
            account_filter: Filter selected on the command line
            targets: TargetOperation for the chosen host source
            folder: Report folder (current directory when None)
            query: ServiceQuery override, built from config when None
            probe: ReachabilityProbe override, built from config when None
        """
        self.config = config
        self.output = output
        self.account_filter = account_filter
        self.targets = targets
        self.folder = folder
        self.query = query
        self.probe = probe

    def run(self) -> AuditSummary:
        """
        Execute the audit.

        Raises:
            ConfigurationError: If a startup gate fails
            NoHostsError: If no candidate hosts were resolved
        """
        started_at = datetime.now()

        if getattr(self.config, 'load_warning', None):
            self.output.warning(self.config.load_warning)

        # Startup gates: input file, output folder, then directory and OU
        self.targets.check_input_file()
        folder = validate_output_folder(self.folder)
        self.targets.prepare_directory()

        self.output.header("SvcSeek Service Account Audit")
        self.output.info(f"Account filter: {self.account_filter.describe()}")

        self.output.subheader("Step 1: Host Resolution")
        resolve_result = self.targets.execute()
        if resolve_result.no_hosts:
            raise NoHostsError(resolve_result.message, query_failed=resolve_result.query_failed)
        self.output.success(
            f"Resolved {len(resolve_result.hosts)} hosts ({resolve_result.source.value})"
        )

        self.output.subheader("Step 2: Service Enumeration")
        writer = ReportWriter(self.config, self.output, folder)
        operation = ServiceOperation(
            self.config,
            self.output,
            self.account_filter,
            probe=self.probe,
            query=self.query,
            notice_sink=writer.append_unreachable
        )
        report = operation.execute(resolve_result.hosts)
        self.output.success(
            f"Enumeration completed: {report.hosts_reachable}/{report.hosts_attempted} hosts online, "
            f"{len(report.records)} matching services"
        )

        self.output.subheader("Step 3: Report")
        writer.print_results(report.records)
        results_path = writer.write_results(report.records)
        self.output.success(f"Results saved to {results_path}")
        if report.unreachable:
            self.output.warning(f"{len(report.unreachable)} hosts not online, logged to {writer.errors_path}")

        summary = AuditSummary(
            filter_description=self.account_filter.describe(),
            host_source=resolve_result.source.value,
            hosts_resolved=len(resolve_result.hosts),
            hosts_attempted=report.hosts_attempted,
            hosts_reachable=report.hosts_reachable,
            hosts_unreachable=len(report.unreachable),
            hosts_query_failed=report.hosts_query_failed,
            hosts_matched=report.hosts_matched,
            matches=len(report.records),
            results_path=results_path,
            errors_path=writer.errors_path,
            started_at=started_at,
            finished_at=datetime.now()
        )
        writer.print_run_summary(summary)
        return summary


def _credential_overrides(args) -> dict:
    return {
        'username': getattr(args, 'username', None),
        'password': getattr(args, 'password', None) or os.environ.get('SVCSEEK_PASSWORD'),
        'domain': getattr(args, 'domain', None),
        'hashes': getattr(args, 'hashes', None),
    }


def create_audit_workflow(args) -> AuditWorkflow:
    """
    Factory function to create a configured AuditWorkflow instance.

    Args:
        args: Parsed command line arguments

    Returns:
        Configured AuditWorkflow instance
    """
    config = load_config(getattr(args, 'config', None))

    output = create_output_manager(
        config,
        quiet=getattr(args, 'quiet', False),
        verbose=getattr(args, 'verbose', False),
        no_colors=getattr(args, 'no_colors', False)
    )

    account_filter = AccountFilter.from_options(
        getattr(args, 'account_name', None),
        getattr(args, 'literal_account_name', None)
    )

    credentials = _credential_overrides(args)
    directory_overrides = dict(credentials)
    directory_overrides['domain_controller'] = getattr(args, 'dc', None)
    directory_overrides['use_ssl'] = getattr(args, 'ldaps', False)

    targets = TargetOperation(
        config,
        output,
        computer_name=getattr(args, 'computer_name', None),
        input_file=getattr(args, 'input_file', None),
        organizational_unit=getattr(args, 'organizational_unit', None),
        directory_factory=lambda: DirectoryClient.from_config(config, directory_overrides)
    )

    return AuditWorkflow(
        config,
        output,
        account_filter,
        targets,
        folder=getattr(args, 'folder', None),
        query=ServiceQuery.from_config(config, credentials)
    )
