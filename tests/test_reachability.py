#!/usr/bin/env python3
"""
Tests for the ping-based reachability probe.
"""

import sys
import os
import subprocess
import unittest
from unittest.mock import Mock, patch

# Add project paths for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from commands.services.reachability import ReachabilityProbe


def _completed(returncode=0, stdout=""):
    return Mock(returncode=returncode, stdout=stdout, stderr="")


class TestPingCommand(unittest.TestCase):

    def test_windows_command_uses_milliseconds(self):
        probe = ReachabilityProbe(timeout=2, system="Windows")
        self.assertEqual(probe.build_command("sql1"), ["ping", "-n", "1", "-w", "2000", "sql1"])

    def test_posix_command_uses_seconds(self):
        probe = ReachabilityProbe(timeout=2, system="Linux")
        self.assertEqual(probe.build_command("sql1"), ["ping", "-c", "1", "-W", "2", "sql1"])

    def test_sub_second_timeout_rounds_up(self):
        probe = ReachabilityProbe(timeout=0.2, system="Linux")
        self.assertEqual(probe.build_command("sql1")[4], "1")


class TestIsReachable(unittest.TestCase):

    @patch('commands.services.reachability.subprocess.run')
    def test_reply_is_reachable(self, mock_run):
        mock_run.return_value = _completed(0)
        self.assertTrue(ReachabilityProbe(system="Linux").is_reachable("sql1"))

    @patch('commands.services.reachability.subprocess.run')
    def test_no_reply_is_unreachable(self, mock_run):
        mock_run.return_value = _completed(1)
        self.assertFalse(ReachabilityProbe(system="Linux").is_reachable("sql1"))

    @patch('commands.services.reachability.subprocess.run')
    def test_probe_errors_are_unreachable(self, mock_run):
        for error in (FileNotFoundError("ping"), subprocess.TimeoutExpired("ping", 3), OSError("denied")):
            with self.subTest(error=type(error).__name__):
                mock_run.side_effect = error
                self.assertFalse(ReachabilityProbe(system="Linux").is_reachable("sql1"))

    @patch('commands.services.reachability.subprocess.run')
    def test_windows_requires_ttl_in_reply(self, mock_run):
        probe = ReachabilityProbe(system="Windows")

        mock_run.return_value = _completed(0, "Reply from 10.0.0.5: Destination host unreachable.")
        self.assertFalse(probe.is_reachable("sql1"))

        mock_run.return_value = _completed(0, "Reply from 10.0.0.5: bytes=32 time<1ms TTL=128")
        self.assertTrue(probe.is_reachable("sql1"))

    @patch('commands.services.reachability.subprocess.run')
    def test_empty_host_is_not_probed(self, mock_run):
        self.assertFalse(ReachabilityProbe(system="Linux").is_reachable(""))
        self.assertFalse(ReachabilityProbe(system="Linux").is_reachable("   "))
        mock_run.assert_not_called()

    @patch('commands.services.reachability.subprocess.run')
    def test_option_like_host_is_not_passed_to_ping(self, mock_run):
        mock_run.return_value = _completed(0)
        for host in ("-f", "--help", "-c 100"):
            with self.subTest(host=host):
                self.assertFalse(ReachabilityProbe(system="Linux").is_reachable(host))
                self.assertFalse(ReachabilityProbe(system="Windows").is_reachable(host))
        mock_run.assert_not_called()


if __name__ == '__main__':
    unittest.main()
