"""
Configuration Loader for the gas report filter.

Implements a layered configuration system:
    hardcoded defaults < .report-filter.yml < env vars < CLI args

Usage:
    from config_loader import build_unified_config, validate_config
    config = build_unified_config(cli_args=args)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List

import yaml

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = ".report-filter.yml"

# ---------------------------------------------------------------------------
# Default configuration
# ---------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """Return all configuration parameters with their defaults.

    This is the lowest-priority layer.  Every configurable key must appear
    here so that downstream code never needs to guard against missing keys.
    """
    return {
        "whitelist_path": "whitelist.json",
        "on_malformed_finding": "keep",
        "log_level": "WARNING",
    }

# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

# (env var names, config key, type tag)
_ENV_MAPPINGS = [
    (("REPORT_FILTER_WHITELIST", "INPUT_WHITELIST"), "whitelist_path", "str"),
    (("REPORT_FILTER_ON_MALFORMED",),                "on_malformed_finding", "str"),
    (("REPORT_FILTER_LOG_LEVEL",),                   "log_level", "upper"),
]


def _coerce(raw: str, type_tag: str) -> Any:
    """Convert a raw env-var string to the appropriate Python type."""
    if not raw.strip():
        raise ValueError("empty value")
    if type_tag == "upper":
        return raw.strip().upper()
    if type_tag == "str":
        return raw
    raise ValueError(f"unknown type tag {type_tag!r}")


def load_env_overrides() -> Dict[str, Any]:
    """Load configuration values from explicitly-set environment variables.

    Only variables that are **present** in ``os.environ`` are returned.
    Both bare names and GitHub-Action-style ``INPUT_`` prefixed names are
    supported.  The first found wins (left-to-right in the mapping tuple).
    """
    overrides: Dict[str, Any] = {}

    for env_names, config_key, type_tag in _ENV_MAPPINGS:
        for env_name in env_names:
            if env_name in os.environ:
                try:
                    overrides[config_key] = _coerce(os.environ[env_name], type_tag)
                except (ValueError, TypeError) as exc:
                    logger.warning(
                        "Ignoring env var %s: could not convert %r to %s (%s)",
                        env_name, os.environ[env_name], type_tag, exc,
                    )
                break  # first match wins

    return overrides

# ---------------------------------------------------------------------------
# CLI argument extraction
# ---------------------------------------------------------------------------

# Mapping: argparse attribute -> config key
_CLI_ATTR_MAP: Dict[str, str] = {
    "whitelist": "whitelist_path",
}


def extract_cli_overrides(args: Any) -> Dict[str, Any]:
    """Extract explicitly-set CLI arguments into a flat config dict.

    Only attributes whose value is not ``None`` are included, so that
    argparse defaults do not shadow earlier layers.
    """
    if args is None:
        return {}

    overrides: Dict[str, Any] = {}
    for attr, config_key in _CLI_ATTR_MAP.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[config_key] = value
    return overrides

# ---------------------------------------------------------------------------
# Merge helpers
# ---------------------------------------------------------------------------

def merge_layers(base: dict, override: dict) -> dict:
    """Merge *override* into *base*.  Only non-None override values win.

    This operates on **flat** dicts (no recursive descent).
    """
    merged = dict(base)
    for key, value in override.items():
        if value is not None:
            merged[key] = value
    return merged

# ---------------------------------------------------------------------------
# .report-filter.yml loader
# ---------------------------------------------------------------------------

def load_project_config(repo_path: str = ".") -> Dict[str, Any]:
    """Load ``.report-filter.yml`` from *repo_path*.

    Returns an empty dict if the file does not exist.  Unknown keys are
    dropped with a warning.

    Raises:
        ConfigurationError: the file exists but is unreadable or not a mapping
    """
    yml_path = Path(repo_path) / PROJECT_CONFIG_FILE
    if not yml_path.is_file():
        return {}

    logger.info("Loading %s from %s", PROJECT_CONFIG_FILE, yml_path)
    try:
        with open(yml_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read {yml_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{yml_path} must contain a mapping, got {type(raw).__name__}")

    known = get_default_config()
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown key '%s' in %s", key, yml_path)
            continue
        values[key] = value
    return values

# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def build_unified_config(cli_args: Any = None, repo_path: str = ".") -> Dict[str, Any]:
    """Build a fully-merged configuration dict.

    Layer precedence (last wins):
        1. Hard-coded defaults          (``get_default_config()``)
        2. ``.report-filter.yml``       (project-level overrides)
        3. Environment variables        (``load_env_overrides()``)
        4. CLI arguments                (``extract_cli_overrides()``)
    """
    # -- Layer 1: defaults --
    config = get_default_config()

    # -- Layer 2: .report-filter.yml --
    project = load_project_config(repo_path)
    if project:
        config = merge_layers(config, project)
        logger.info("Applied %s overrides (%d keys)", PROJECT_CONFIG_FILE, len(project))

    # -- Layer 3: env vars --
    env_overrides = load_env_overrides()
    if env_overrides:
        config = merge_layers(config, env_overrides)
        logger.debug("Applied %d env-var overrides", len(env_overrides))

    # -- Layer 4: CLI args --
    cli_overrides = extract_cli_overrides(cli_args)
    if cli_overrides:
        config = merge_layers(config, cli_overrides)
        logger.debug("Applied %d CLI overrides", len(cli_overrides))

    return config

# ---------------------------------------------------------------------------
# Configuration validation
# ---------------------------------------------------------------------------

_VALID_MALFORMED_POLICIES = {"keep", "fail"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """Validate a configuration dict and return a list of warnings/errors.

    An empty list means the config is valid.  Entries starting with
    ``ERROR:`` must abort the run.
    """
    issues: List[str] = []

    whitelist_path = config.get("whitelist_path")
    if not isinstance(whitelist_path, str) or not whitelist_path:
        issues.append("ERROR: whitelist_path must be a non-empty string.")
    elif not Path(whitelist_path).is_file():
        issues.append(
            f"WARNING: whitelist file '{whitelist_path}' not found. "
            "No findings will be filtered."
        )

    policy = config.get("on_malformed_finding", "keep")
    if policy not in _VALID_MALFORMED_POLICIES:
        issues.append(
            f"ERROR: Invalid on_malformed_finding '{policy}'. "
            f"Must be one of: {', '.join(sorted(_VALID_MALFORMED_POLICIES))}"
        )

    log_level = config.get("log_level", "WARNING")
    if not isinstance(log_level, str) or log_level.upper() not in _VALID_LOG_LEVELS:
        issues.append(
            f"ERROR: Invalid log_level '{log_level}'. "
            f"Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )

    return issues
