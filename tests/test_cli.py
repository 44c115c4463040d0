#!/usr/bin/env python3
"""
End-to-end tests for the svcseek command line.

The ping probe and the remote service query are patched at class level; the
rest of the pipeline (argument parsing, host resolution, filtering and both
report files) runs for real against a temporary folder.
"""

import sys
import os
import shutil
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch

# Add project paths for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import svcseek
from commands.services import ReachabilityProbe, ServiceEntry, ServiceQuery
from commands.targets import DirectoryClient


SERVICES = {
    "SQL1": [
        ServiceEntry("MSSQLSERVER", "SQL Server (MSSQLSERVER)", "DOMAIN\\svc_sql"),
        ServiceEntry("Spooler", "Print Spooler", "LocalSystem"),
    ],
    "SQL2": [
        ServiceEntry("MSSQLSERVER", "SQL Server (MSSQLSERVER)", "DOMAIN\\sql"),
    ],
    "WEB1": [
        ServiceEntry("W3SVC", "World Wide Web Publishing", "DOMAIN\\svc_web"),
    ],
}


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.folder)
        self.input_file = os.path.join(self.folder, "hosts.txt")
        with open(self.input_file, 'w', encoding='utf-8') as f:
            f.write("SQL1\nSQL2\nWEB1\n")
        self.config_file = os.path.join(self.folder, "missing-config.json")

        patchers = [
            patch('commands.services.operation.RPC_AVAILABLE', True),
            patch.object(ReachabilityProbe, 'is_reachable', return_value=True),
            patch.object(ServiceQuery, 'enumerate_services', side_effect=lambda host: SERVICES[host]),
            patch.object(DirectoryClient, 'connect'),
            patch('sys.stdout', new_callable=StringIO),
        ]
        started = [p.start() for p in patchers]
        for p in patchers:
            self.addCleanup(p.stop)
        _, self.is_reachable, self.enumerate_services, self.directory_connect, self.stdout = started

    def _run(self, *args):
        return svcseek.main(["--config", self.config_file, "--folder", self.folder, "-q", *args])

    def _results(self):
        with open(os.path.join(self.folder, "ServersWithServiceAccount.txt"), encoding='utf-8') as f:
            return f.read()

    def _probed(self):
        return [c.args[0] for c in self.is_reachable.call_args_list]

    def test_input_file_filtered_by_computer_name(self):
        rc = self._run("--account-name", "svc", "--input-file", self.input_file, "--computer-name", "SQL")

        self.assertEqual(rc, 0)
        self.assertEqual(self._probed(), ["SQL1", "SQL2"])
        results = self._results()
        self.assertIn("DOMAIN\\svc_sql", results)
        self.assertNotIn("WEB1", results)
        self.directory_connect.assert_not_called()

    def test_literal_account_rejects_domain_prefixed_form(self):
        rc = self._run("--literal-account-name", "sql@domain.tld", "--input-file", self.input_file)

        self.assertEqual(rc, 0)
        self.assertEqual(self._probed(), ["SQL1", "SQL2", "WEB1"])
        self.assertNotIn("DOMAIN\\sql", self._results())

    def test_unreachable_hosts_go_to_errors_file(self):
        self.is_reachable.side_effect = lambda host: host != "SQL2"

        rc = self._run("--account-name", "svc", "--input-file", self.input_file)

        self.assertEqual(rc, 0)
        with open(os.path.join(self.folder, "ServersWithServiceAccountErrors.txt"), encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].startswith("Computer SQL2 was not online "))
        queried = [c.args[0] for c in self.enumerate_services.call_args_list]
        self.assertEqual(queried, ["SQL1", "WEB1"])

    def test_folder_that_is_a_file_aborts_before_probing(self):
        rc = svcseek.main([
            "--config", self.config_file, "--folder", self.input_file, "-q",
            "--account-name", "svc", "--input-file", self.input_file
        ])

        self.assertEqual(rc, 1)
        self.is_reachable.assert_not_called()

    def test_missing_folder_aborts_before_probing(self):
        missing = os.path.join(self.folder, "no-such-dir")
        rc = svcseek.main([
            "--config", self.config_file, "--folder", missing, "-q",
            "--account-name", "svc", "--input-file", self.input_file
        ])

        self.assertEqual(rc, 1)
        self.is_reachable.assert_not_called()
        self.enumerate_services.assert_not_called()
        self.assertFalse(os.path.exists(missing))

    def test_blank_line_is_attempted_and_logged_as_not_online(self):
        with open(self.input_file, 'w', encoding='utf-8') as f:
            f.write("SQL1\n\nWEB1\n")
        self.is_reachable.side_effect = lambda host: bool(host)

        rc = self._run("--account-name", "svc", "--input-file", self.input_file)

        self.assertEqual(rc, 0)
        self.assertEqual(self._probed(), ["SQL1", "", "WEB1"])
        with open(os.path.join(self.folder, "ServersWithServiceAccountErrors.txt"), encoding='utf-8') as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), 1)
        self.assertTrue(lines[0].startswith("Computer  was not online "))

    def test_missing_input_file_aborts_before_directory(self):
        rc = self._run("--account-name", "svc", "--input-file", os.path.join(self.folder, "nope.txt"),
                       "--computer-name", "SQL")

        self.assertEqual(rc, 1)
        self.directory_connect.assert_not_called()
        self.is_reachable.assert_not_called()

    def test_no_hosts_after_filtering(self):
        rc = self._run("--account-name", "svc", "--input-file", self.input_file, "--computer-name", "APP")

        self.assertEqual(rc, 1)
        self.is_reachable.assert_not_called()
        self.assertFalse(os.path.exists(os.path.join(self.folder, "ServersWithServiceAccount.txt")))

    def test_quiet_and_verbose_are_exclusive(self):
        rc = svcseek.main(["--account-name", "svc", "-q", "-v"])
        self.assertEqual(rc, 1)

    def test_account_options_are_mutually_exclusive(self):
        with patch('sys.stderr', new_callable=StringIO):
            with self.assertRaises(SystemExit) as ctx:
                svcseek.main(["--account-name", "svc", "--literal-account-name", "svc"])
            self.assertEqual(ctx.exception.code, 2)

            with self.assertRaises(SystemExit) as ctx:
                svcseek.main(["--input-file", self.input_file])
            self.assertEqual(ctx.exception.code, 2)

            with self.assertRaises(SystemExit) as ctx:
                svcseek.main(["--account-name", "  "])
            self.assertEqual(ctx.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
