"""
Scanner report reading.

Parses the JUnit-style XML report produced by gosec into the dataclasses
from report_filter.models. Parsing goes through defusedxml: the report is
the output of an external tool and entity expansion must not be honoured.

Any parse problem is fatal (ReportParseError). An unparsable report means the
scanner's output format changed and no safe filtering can happen.
"""

import logging
from typing import Iterable, Union
from xml.etree.ElementTree import Element, ParseError, tostring

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from exceptions import ReportParseError
from report_filter.models import Failure, Report, TestCase, TestSuite

logger = logging.getLogger(__name__)

ROOT_TAG = "testsuites"
SUITE_TAG = "testsuite"
CASE_TAG = "testcase"
FAILURE_TAG = "failure"


def _parse_count(raw: str, suite_name: str) -> int:
    if raw == "":
        return 0
    try:
        return int(raw)
    except ValueError:
        raise ReportParseError(
            f"testsuite '{suite_name}': tests attribute {raw!r} is not an integer"
        ) from None


def _parse_failure(element: Element) -> Failure:
    return Failure(
        message=element.get("message", ""),
        text=element.text or "",
        markup="".join(tostring(child, encoding="unicode") for child in element),
    )


def _parse_testcase(element: Element) -> TestCase:
    failure_el = element.find(FAILURE_TAG)
    return TestCase(
        name=element.get("name", ""),
        failure=_parse_failure(failure_el) if failure_el is not None else None,
    )


def _parse_testsuite(element: Element) -> TestSuite:
    name = element.get("name", "")
    return TestSuite(
        name=name,
        tests=_parse_count(element.get("tests", ""), name),
        testcases=tuple(_parse_testcase(case) for case in element.findall(CASE_TAG)),
    )


def parse_report(text: Union[str, bytes]) -> Report:
    """Parse report XML.

    Bytes are decoded according to the document's XML declaration (UTF-8
    when it has none); str input is taken as already decoded.

    Raises:
        ReportParseError: malformed XML, forbidden constructs or wrong root
    """
    try:
        root = fromstring(text)
    except (ParseError, DefusedXmlException, LookupError, ValueError) as exc:
        raise ReportParseError(f"Unable to parse report: {exc}") from exc

    if root.tag != ROOT_TAG:
        raise ReportParseError(
            f"Unable to parse report: expected element type <{ROOT_TAG}> but have <{root.tag}>"
        )

    report = Report(
        testsuites=tuple(_parse_testsuite(suite) for suite in root.findall(SUITE_TAG))
    )
    logger.debug(
        "Parsed report: %d testsuites, %d findings",
        len(report.testsuites), report.total_findings,
    )
    return report


def read_report(stream: Iterable[Union[str, bytes]]) -> Report:
    """Read *stream* to the end and parse it as a report.

    Binary streams are preferred: the bytes are handed to the parser as-is so
    the XML declaration, not the locale, decides the encoding.
    """
    try:
        lines = list(stream)
    except UnicodeDecodeError as exc:
        raise ReportParseError(f"Unable to decode report: {exc}") from exc

    if lines and isinstance(lines[0], bytes):
        return parse_report(b"".join(line.rstrip(b"\r\n") + b"\n" for line in lines))
    return parse_report("".join(line.rstrip("\r\n") + "\n" for line in lines))


__all__ = ["parse_report", "read_report"]
