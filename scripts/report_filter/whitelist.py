"""
Whitelist loading.

The whitelist is a JSON file listing findings that were already triaged:

    {"Issues": [{"details": "...", "file": "pkg/foo.go", "code": "G101"}]}

A whitelist must never block the report from being produced, so a missing,
unreadable or malformed file degrades to an empty whitelist (nothing is
filtered). Problems are logged at INFO level only.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from report_filter.models import Whitelist

logger = logging.getLogger(__name__)


def _read_whitelist_text(path: Path) -> Optional[str]:
    """Return the file contents, or None if it cannot be read"""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.info("Whitelist %s not readable (%s); filtering nothing", path, exc)
        return None


def _parse_whitelist(text: str, path: Path) -> Optional[Whitelist]:
    """Validate the JSON text, or return None if it does not match the schema"""
    try:
        return Whitelist.model_validate_json(text)
    except ValidationError as exc:
        logger.info(
            "Whitelist %s is malformed (%d errors); filtering nothing",
            path, exc.error_count(),
        )
        return None


def load_whitelist(path: Union[str, Path]) -> Whitelist:
    """Load the whitelist at *path*.

    Args:
        path: Location of the whitelist JSON file

    Returns:
        Parsed whitelist, or an empty one if the file is missing or invalid
    """
    path = Path(path)

    text = _read_whitelist_text(path)
    whitelist = _parse_whitelist(text, path) if text is not None else None
    if whitelist is None:
        return Whitelist.empty()

    logger.debug("Loaded %d whitelist entries from %s", len(whitelist), path)
    return whitelist


__all__ = ["load_whitelist"]
