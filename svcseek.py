#!/usr/bin/env python3
"""
SvcSeek - Service Account Audit Toolkit

Finds Windows services running under a given service account across the
server estate. Hosts come from Active Directory (every server, or computers
matching a name pattern) or from a plain host list file; each host is pinged,
its service manager is queried over RPC, and matching services are written to
a report.

Usage:
    svcseek --account-name svc_sql                        # Substring match, all AD servers
    svcseek --literal-account-name 'CORP\\svc_sql'        # Exact match
    svcseek --account-name svc --input-file hosts.txt     # Hosts from a file, no AD needed
    svcseek --help                                        # Help system
"""

import argparse
import sys
from typing import List, Optional

from shared.logging_config import setup_logging

__version__ = "1.0.0"


def non_blank(value: str) -> str:
    """argparse type that rejects empty or whitespace-only values."""
    if not value or not value.strip():
        raise argparse.ArgumentTypeError("value cannot be empty")
    return value


def create_main_parser() -> argparse.ArgumentParser:
    """
    Create the main argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='svcseek',
        description='SvcSeek - Service Account Audit Toolkit',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  svcseek --account-name svc_sql --dc dc01.corp.local --domain CORP --username auditor
  svcseek --account-name svc --computer-name SQL --organizational-unit "OU=Servers,DC=corp,DC=local"
  svcseek --literal-account-name 'CORP\\svc_backup' --input-file servers.txt --folder C:\\Reports

Host sources:
  --computer-name only       AD computers whose DNS host name contains the pattern
  --input-file only          every line of the file, in order
  --input-file + --computer-name   lines of the file containing the pattern
  neither                    every AD computer with a server operating system

--account-name matches any logon identity containing the value; --literal-account-name
matches the whole identity only. Both comparisons ignore case.

Reports are written to ServersWithServiceAccount.txt (matches) and appended to
ServersWithServiceAccountErrors.txt (hosts that were not online).
"""
    )

    account_group = parser.add_mutually_exclusive_group(required=True)
    account_group.add_argument(
        '--account-name',
        type=non_blank,
        metavar='NAME',
        help='Match services whose logon account contains NAME (case-insensitive)'
    )
    account_group.add_argument(
        '--literal-account-name',
        type=non_blank,
        metavar='NAME',
        help='Match services whose logon account is exactly NAME (case-insensitive)'
    )

    parser.add_argument(
        '--computer-name',
        type=non_blank,
        metavar='PATTERN',
        help='Only audit hosts whose name contains PATTERN'
    )
    parser.add_argument(
        '--input-file',
        type=str,
        metavar='FILE',
        help='Read host names from FILE (one per line) instead of Active Directory'
    )
    parser.add_argument(
        '--organizational-unit',
        type=non_blank,
        metavar='DN',
        help='Restrict the Active Directory search to this OU subtree'
    )
    parser.add_argument(
        '--folder',
        type=str,
        metavar='DIR',
        help='Folder for the report files (default: current directory)'
    )

    # Directory and credentials
    parser.add_argument(
        '--dc',
        type=str,
        metavar='HOST',
        help='Domain controller for LDAP queries (default: directory.domain_controller in config)'
    )
    parser.add_argument(
        '--ldaps',
        action='store_true',
        help='Use LDAP over SSL for directory queries'
    )
    parser.add_argument(
        '--domain',
        type=str,
        metavar='DOMAIN',
        help='Domain of the audit account'
    )
    parser.add_argument(
        '--username',
        type=str,
        metavar='USER',
        help='Audit account used for LDAP and remote service queries'
    )
    parser.add_argument(
        '--password',
        type=str,
        metavar='PASSWORD',
        help='Password of the audit account (default: SVCSEEK_PASSWORD environment variable)'
    )
    parser.add_argument(
        '--hashes',
        type=str,
        metavar='LM:NT',
        help='NTLM hashes of the audit account instead of a password'
    )

    # Global options
    parser.add_argument(
        '--config',
        type=str,
        metavar='FILE',
        help='Configuration file path (default: conf/config.json)'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output to screen'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )
    parser.add_argument(
        '--no-colors',
        action='store_true',
        help='Disable colored output'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'SvcSeek {__version__}'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the SvcSeek CLI."""
    parser = create_main_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    # Validate global argument combinations
    if args.quiet and args.verbose:
        print("Error: Cannot use both --quiet and --verbose options")
        return 1

    setup_logging(verbose=args.verbose)

    from shared.config import ConfigurationError
    from workflow import NoHostsError, create_audit_workflow

    workflow = None
    try:
        workflow = create_audit_workflow(args)
        workflow.run()
        return 0

    except ConfigurationError as e:
        _report_error(workflow, f"Configuration error: {e}")
        return 1
    except NoHostsError as e:
        _report_error(workflow, str(e))
        return 1
    except KeyboardInterrupt:
        print("\n\nOperation interrupted by user")
        return 130
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def _report_error(workflow, message: str) -> None:
    if workflow is not None:
        workflow.output.error(message)
    else:
        print(f"Error: {message}")


if __name__ == "__main__":
    sys.exit(main())
