#!/usr/bin/env python3
"""
Unit tests for the service account filter.

Covers both matching modes and the construction rules that keep them
mutually exclusive.
"""

import sys
import os
import unittest
from dataclasses import FrozenInstanceError

# Add project paths for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shared.account_filter import AccountFilter, FilterMode


class TestSubstringFilter(unittest.TestCase):
    """Containment matching."""

    def setUp(self):
        self.account_filter = AccountFilter.substring("svc")

    def test_matches_domain_prefixed_account(self):
        self.assertTrue(self.account_filter.matches("DOMAIN\\svc_sql"))

    def test_match_ignores_case(self):
        self.assertTrue(self.account_filter.matches("corp\\SVC_Backup"))
        self.assertTrue(AccountFilter.substring("SQL").matches("sql@domain.tld"))

    def test_no_match_without_pattern(self):
        self.assertFalse(self.account_filter.matches("LocalSystem"))
        self.assertFalse(self.account_filter.matches("NT AUTHORITY\\NetworkService"))

    def test_empty_start_name_never_matches(self):
        self.assertFalse(self.account_filter.matches(""))
        self.assertFalse(self.account_filter.matches(None))

    def test_pattern_is_literal_text(self):
        """Wildcard characters in the pattern are not interpreted."""
        wildcard = AccountFilter.substring("svc*sql")
        self.assertFalse(wildcard.matches("DOMAIN\\svc_sql"))
        self.assertTrue(wildcard.matches("DOMAIN\\svc*sql"))

    def test_describe(self):
        self.assertEqual(self.account_filter.describe(), "*svc*")


class TestExactFilter(unittest.TestCase):
    """Whole-identity matching."""

    def test_equal_identity_matches_ignoring_case(self):
        account_filter = AccountFilter.exact("sql@domain.tld")
        self.assertTrue(account_filter.matches("sql@domain.tld"))
        self.assertTrue(account_filter.matches("SQL@Domain.TLD"))

    def test_domain_prefixed_form_is_rejected(self):
        account_filter = AccountFilter.exact("sql@domain.tld")
        self.assertFalse(account_filter.matches("DOMAIN\\sql"))

    def test_partial_match_is_rejected(self):
        account_filter = AccountFilter.exact("DOMAIN\\svc")
        self.assertFalse(account_filter.matches("DOMAIN\\svc_sql"))
        self.assertFalse(account_filter.matches("svc"))

    def test_describe(self):
        self.assertEqual(AccountFilter.exact("DOMAIN\\svc").describe(), "'DOMAIN\\svc'")


class TestFilterConstruction(unittest.TestCase):
    """Exactly one mode must be supplied."""

    def test_account_name_selects_substring(self):
        account_filter = AccountFilter.from_options(account_name="svc")
        self.assertIs(account_filter.mode, FilterMode.SUBSTRING)
        self.assertEqual(account_filter.value, "svc")

    def test_literal_account_name_selects_exact(self):
        account_filter = AccountFilter.from_options(literal_account_name="DOMAIN\\svc")
        self.assertIs(account_filter.mode, FilterMode.EXACT)

    def test_both_options_rejected(self):
        with self.assertRaises(ValueError):
            AccountFilter.from_options(account_name="svc", literal_account_name="DOMAIN\\svc")

    def test_neither_option_rejected(self):
        with self.assertRaises(ValueError):
            AccountFilter.from_options()

    def test_blank_value_rejected(self):
        with self.assertRaises(ValueError):
            AccountFilter.from_options(account_name="   ")
        with self.assertRaises(ValueError):
            AccountFilter.exact("")

    def test_filter_is_immutable(self):
        account_filter = AccountFilter.substring("svc")
        with self.assertRaises(FrozenInstanceError):
            account_filter.value = "other"


if __name__ == '__main__':
    unittest.main()
