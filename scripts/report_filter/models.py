"""
Report Filter Data Models.

This module contains the data structures shared across the report filter:
the JUnit-style scanner report emitted by gosec and the whitelist of
triaged findings.

Classes:
    Failure: The <failure> payload of a single finding
    TestCase: A single finding (<testcase>)
    TestSuite: All findings for one scanned file (<testsuite>)
    Report: The whole report (<testsuites>)
    WhitelistEntry: One accepted (file, code) pair
    Whitelist: The parsed whitelist file
"""

from dataclasses import dataclass, field
from typing import Optional
from xml.etree.ElementTree import Element

from defusedxml.ElementTree import fromstring
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Failure:
    """Failure payload, kept verbatim so it can be re-emitted unchanged"""

    message: str
    text: str = ""
    # Serialized child elements of <failure> (with their tails), after ``text``
    markup: str = ""

    def child_elements(self) -> list[Element]:
        """Re-parse ``markup`` into fresh elements"""
        if not self.markup:
            return []
        return list(fromstring(f"<failure>{self.markup}</failure>"))

    @property
    def body(self) -> str:
        """Full text content of the failure element, markup stripped"""
        parts = [self.text]
        for child in self.child_elements():
            parts.extend(child.itertext())
            parts.append(child.tail or "")
        return "".join(parts)


@dataclass(frozen=True)
class TestCase:
    """A single scanner finding"""

    __test__ = False  # not a pytest test class

    name: str
    failure: Optional[Failure] = None


@dataclass(frozen=True)
class TestSuite:
    """Findings reported for one scanned unit"""

    __test__ = False

    name: str
    tests: int
    testcases: tuple[TestCase, ...] = ()


@dataclass(frozen=True)
class Report:
    """Root of the scanner report"""

    testsuites: tuple[TestSuite, ...] = field(default_factory=tuple)

    @property
    def total_findings(self) -> int:
        return sum(len(suite.testcases) for suite in self.testsuites)


class WhitelistEntry(BaseModel):
    """A previously triaged finding that should no longer be reported.

    ``details`` is free text for humans and is never used for matching.
    """

    details: str = ""
    file: str = ""
    code: str = ""

    model_config = {"frozen": True, "extra": "ignore"}


class Whitelist(BaseModel):
    """Typed view of the whitelist file: ``{"Issues": [...]}``"""

    issues: list[WhitelistEntry] = Field(default_factory=list, alias="Issues")

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @classmethod
    def empty(cls) -> "Whitelist":
        return cls(issues=[])

    def is_exempt(self, file: str, code: str) -> bool:
        """Return True if any entry matches both file and code exactly"""
        for entry in self.issues:
            if entry.file == file and entry.code == code:
                return True
        return False

    def __len__(self) -> int:
        return len(self.issues)


__all__ = [
    "Failure",
    "Report",
    "TestCase",
    "TestSuite",
    "Whitelist",
    "WhitelistEntry",
]
