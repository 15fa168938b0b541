"""
Filtered report serialization.

Writes the report back in the same JUnit-style XML schema it was read in,
indented two spaces per level and preceded by a single XML declaration.
"""

import io
import logging
from typing import BinaryIO, TextIO, Union
from xml.etree.ElementTree import Element, ParseError, SubElement, indent, tostring

from defusedxml import DefusedXmlException

from exceptions import SerializationError
from report_filter.models import Failure, Report
from report_filter.reader import CASE_TAG, FAILURE_TAG, ROOT_TAG, SUITE_TAG

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "


def _build_tree(report: Report) -> Element:
    root = Element(ROOT_TAG)
    failures: list[tuple[Element, Failure]] = []

    for suite in report.testsuites:
        suite_el = SubElement(root, SUITE_TAG, name=suite.name, tests=str(suite.tests))
        for testcase in suite.testcases:
            case_el = SubElement(suite_el, CASE_TAG, name=testcase.name)
            if testcase.failure is None:
                continue
            failure_el = SubElement(case_el, FAILURE_TAG, message=testcase.failure.message)
            failure_el.text = testcase.failure.text or None
            failures.append((failure_el, testcase.failure))

    indent(root, space=INDENT)

    # Failure markup is attached after indenting so its whitespace survives untouched
    for failure_el, failure in failures:
        for child in failure.child_elements():
            failure_el.append(child)

    return root


def serialize_report(report: Report) -> str:
    """Return the full XML document for *report*, declaration included"""
    try:
        body = tostring(_build_tree(report), encoding="unicode", short_empty_elements=False)
    except (TypeError, ValueError, ParseError, DefusedXmlException) as exc:
        raise SerializationError(f"Unable to serialize report: {exc}") from exc
    return f"{XML_DECLARATION}\n{body}"


def write_report(report: Report, stream: Union[BinaryIO, TextIO]) -> None:
    """Serialize *report* and write it to *stream*.

    Binary streams receive UTF-8 bytes, matching the declaration. Text
    streams are written as-is and their own encoding applies.

    Raises:
        SerializationError: serialization failed or the stream rejected the write
    """
    document = serialize_report(report) + "\n"
    try:
        if isinstance(stream, io.TextIOBase):
            stream.write(document)
        else:
            stream.write(document.encode("utf-8"))
        stream.flush()
    except (OSError, ValueError) as exc:
        raise SerializationError(f"Unable to write report: {exc}") from exc
    logger.debug("Wrote report with %d testsuites", len(report.testsuites))


__all__ = ["XML_DECLARATION", "serialize_report", "write_report"]
