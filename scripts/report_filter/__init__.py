"""Whitelist filtering for gosec JUnit XML reports."""

from report_filter.engine import FilterStats, extract_match_code, filter_report, filter_report_with_stats
from report_filter.models import Failure, Report, TestCase, TestSuite, Whitelist, WhitelistEntry
from report_filter.reader import parse_report, read_report
from report_filter.whitelist import load_whitelist
from report_filter.writer import serialize_report, write_report

__all__ = [
    "Failure",
    "FilterStats",
    "Report",
    "TestCase",
    "TestSuite",
    "Whitelist",
    "WhitelistEntry",
    "extract_match_code",
    "filter_report",
    "filter_report_with_stats",
    "load_whitelist",
    "parse_report",
    "read_report",
    "serialize_report",
    "write_report",
]
