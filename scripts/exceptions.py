#!/usr/bin/env python3
"""
Report Filter Exceptions Module

Custom exception classes for the gas report filter.
Centralized exception definitions for consistent error handling.
"""

__all__ = [
    "ConfigurationError",
    "MalformedFindingError",
    "ReportFilterError",
    "ReportParseError",
    "SerializationError",
]


class ReportFilterError(Exception):
    """Base exception for all report filter errors"""
    pass


class ReportParseError(ReportFilterError):
    """Raised when the scanner report on stdin cannot be parsed"""
    pass


class MalformedFindingError(ReportFilterError):
    """Raised when a finding carries no extractable match code"""

    def __init__(self, finding_name: str, reason: str):
        self.finding_name = finding_name
        self.reason = reason
        super().__init__(f"Malformed finding '{finding_name}': {reason}")


class SerializationError(ReportFilterError):
    """Raised when the filtered report cannot be written"""
    pass


class ConfigurationError(ReportFilterError):
    """Raised when configuration values are invalid or unreadable"""
    pass
