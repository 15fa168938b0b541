"""
Whitelist filtering of scanner reports.

A finding is exempt when a whitelist entry names exactly the same file as
the finding and exactly the same rule code as the one trailing its failure
body (``"... > G101"``). Exempt findings are removed, the ``tests`` count of
every remaining testsuite is recomputed and testsuites left without
findings are dropped.

Findings whose body has no ``"> "`` separator are handled according to the
malformed-finding policy: ``keep`` retains them as non-exempt, ``fail``
re-raises MalformedFindingError. They are never silently dropped.
"""

import logging
from dataclasses import dataclass, replace

from exceptions import ConfigurationError, MalformedFindingError
from report_filter.models import Report, TestCase, TestSuite, Whitelist

logger = logging.getLogger(__name__)

CODE_SEPARATOR = "> "

POLICY_KEEP = "keep"
POLICY_FAIL = "fail"
MALFORMED_POLICIES = (POLICY_KEEP, POLICY_FAIL)


@dataclass
class FilterStats:
    """Counters collected during one filtering pass"""

    findings_seen: int = 0
    findings_suppressed: int = 0
    findings_malformed: int = 0
    suites_dropped: int = 0

    @property
    def findings_kept(self) -> int:
        return self.findings_seen - self.findings_suppressed


def extract_match_code(testcase: TestCase) -> str:
    """Return the rule code after the first ``"> "`` of the failure body.

    Raises:
        MalformedFindingError: no failure element or no separator
    """
    if testcase.failure is None:
        raise MalformedFindingError(testcase.name, "no <failure> element")

    _, separator, code = testcase.failure.body.partition(CODE_SEPARATOR)
    if not separator:
        raise MalformedFindingError(
            testcase.name, f"failure body has no {CODE_SEPARATOR!r} separator"
        )
    return code.strip()


def _is_exempt(whitelist: Whitelist, testcase: TestCase, on_malformed: str, stats: FilterStats) -> bool:
    try:
        code = extract_match_code(testcase)
    except MalformedFindingError as exc:
        stats.findings_malformed += 1
        if on_malformed == POLICY_FAIL:
            raise
        logger.warning("%s; keeping it in the report", exc)
        return False
    return whitelist.is_exempt(testcase.name, code)


def _filter_testsuite(
    whitelist: Whitelist, suite: TestSuite, on_malformed: str, stats: FilterStats
) -> TestSuite:
    kept = []
    for testcase in suite.testcases:
        stats.findings_seen += 1
        if _is_exempt(whitelist, testcase, on_malformed, stats):
            stats.findings_suppressed += 1
            logger.debug("Suppressed whitelisted finding %s", testcase.name)
            continue
        kept.append(testcase)
    return replace(suite, tests=len(kept), testcases=tuple(kept))


def filter_report_with_stats(
    whitelist: Whitelist, report: Report, *, on_malformed: str = POLICY_KEEP
) -> tuple[Report, FilterStats]:
    """Filter *report* against *whitelist* and return the new report with counters.

    Neither argument is modified.

    Raises:
        ConfigurationError: unknown malformed-finding policy
        MalformedFindingError: malformed finding under the ``fail`` policy
    """
    if on_malformed not in MALFORMED_POLICIES:
        raise ConfigurationError(
            f"Invalid malformed finding policy '{on_malformed}'. "
            f"Must be one of: {', '.join(MALFORMED_POLICIES)}"
        )

    stats = FilterStats()
    surviving = []
    for suite in report.testsuites:
        filtered = _filter_testsuite(whitelist, suite, on_malformed, stats)
        if not filtered.testcases:
            stats.suites_dropped += 1
            logger.debug("Dropped testsuite %s: every finding whitelisted", suite.name)
            continue
        surviving.append(filtered)

    logger.info(
        "Suppressed %d of %d findings, dropped %d testsuites",
        stats.findings_suppressed, stats.findings_seen, stats.suites_dropped,
    )
    return Report(testsuites=tuple(surviving)), stats


def filter_report(whitelist: Whitelist, report: Report, *, on_malformed: str = POLICY_KEEP) -> Report:
    """Return a copy of *report* without the findings exempted by *whitelist*"""
    filtered, _ = filter_report_with_stats(whitelist, report, on_malformed=on_malformed)
    return filtered


__all__ = [
    "CODE_SEPARATOR",
    "FilterStats",
    "MALFORMED_POLICIES",
    "POLICY_FAIL",
    "POLICY_KEEP",
    "extract_match_code",
    "filter_report",
    "filter_report_with_stats",
]
