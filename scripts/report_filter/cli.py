"""CLI entry point for the gas report filter.

Reads a gosec JUnit XML report from stdin, removes the findings listed in the
whitelist file and writes the filtered report to stdout:

    gosec -fmt=junit-xml ./... | gas-report-filter --whitelist whitelist.json
"""

import argparse
import logging
import sys
from typing import IO, Any, Dict, Optional, Sequence

from config_loader import build_unified_config, validate_config
from exceptions import ConfigurationError, ReportFilterError
from report_filter.engine import FilterStats, filter_report_with_stats
from report_filter.reader import read_report
from report_filter.whitelist import load_whitelist
from report_filter.writer import write_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Remove whitelisted findings from a gosec JUnit XML report (stdin -> stdout)",
    )
    parser.add_argument(
        "--whitelist",
        default=None,
        help="Path of whitelist file (default: whitelist.json)",
    )
    return parser


def run(config: Dict[str, Any], stdin: IO, stdout: IO) -> FilterStats:
    """Run one filtering pass with an already-resolved configuration.

    Raises:
        ReportFilterError: report parse, malformed finding or write failure
    """
    whitelist = load_whitelist(config["whitelist_path"])
    report = read_report(stdin)

    filtered, stats = filter_report_with_stats(
        whitelist, report, on_malformed=config["on_malformed_finding"]
    )
    write_report(filtered, stdout)
    return stats


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for the report filter"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_unified_config(cli_args=args)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG

    issues = validate_config(config)
    errors = [issue for issue in issues if issue.startswith("ERROR")]
    if errors:
        for issue in errors:
            logger.error("%s", issue)
        return EXIT_CONFIG

    logging.getLogger().setLevel(config["log_level"].upper())
    for issue in issues:
        logger.info("%s", issue)

    try:
        # Binary stdio: the XML declaration governs the encoding
        stats = run(
            config,
            getattr(sys.stdin, "buffer", sys.stdin),
            getattr(sys.stdout, "buffer", sys.stdout),
        )
    except ReportFilterError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE

    logger.info(
        "Kept %d findings (%d suppressed, %d malformed)",
        stats.findings_kept, stats.findings_suppressed, stats.findings_malformed,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
