"""
Tests for layered configuration

Tests config_loader.py: defaults, .report-filter.yml, env var overrides,
CLI overrides, the full merge chain and validation.
"""

import os
import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "scripts"))

from config_loader import (  # noqa: E402
    _coerce,
    build_unified_config,
    extract_cli_overrides,
    get_default_config,
    load_env_overrides,
    load_project_config,
    merge_layers,
    validate_config,
)
from exceptions import ConfigurationError  # noqa: E402

_ENV_VARS = (
    "REPORT_FILTER_WHITELIST",
    "INPUT_WHITELIST",
    "REPORT_FILTER_ON_MALFORMED",
    "REPORT_FILTER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Test get_default_config
# ============================================================================


class TestGetDefaultConfig:
    def test_sensible_defaults(self):
        config = get_default_config()
        assert config == {
            "whitelist_path": "whitelist.json",
            "on_malformed_finding": "keep",
            "log_level": "WARNING",
        }

    def test_returns_fresh_dict(self):
        get_default_config()["whitelist_path"] = "changed"
        assert get_default_config()["whitelist_path"] == "whitelist.json"


# ============================================================================
# Test load_env_overrides
# ============================================================================


class TestLoadEnvOverrides:
    def test_empty_when_no_env(self):
        assert load_env_overrides() == {}

    def test_whitelist_path(self):
        with patch.dict(os.environ, {"REPORT_FILTER_WHITELIST": "ci/wl.json"}):
            assert load_env_overrides() == {"whitelist_path": "ci/wl.json"}

    def test_input_prefix(self):
        with patch.dict(os.environ, {"INPUT_WHITELIST": "action/wl.json"}):
            assert load_env_overrides()["whitelist_path"] == "action/wl.json"

    def test_first_match_wins(self):
        with patch.dict(
            os.environ,
            {"REPORT_FILTER_WHITELIST": "first.json", "INPUT_WHITELIST": "second.json"},
        ):
            assert load_env_overrides()["whitelist_path"] == "first.json"

    def test_log_level_uppercased(self):
        with patch.dict(os.environ, {"REPORT_FILTER_LOG_LEVEL": " debug "}):
            assert load_env_overrides()["log_level"] == "DEBUG"

    def test_empty_value_ignored(self):
        with patch.dict(os.environ, {"REPORT_FILTER_WHITELIST": ""}):
            assert "whitelist_path" not in load_env_overrides()

    @pytest.mark.parametrize(
        "env_name",
        ["REPORT_FILTER_WHITELIST", "REPORT_FILTER_ON_MALFORMED", "REPORT_FILTER_LOG_LEVEL"],
    )
    def test_blank_value_ignored_for_every_key(self, env_name):
        with patch.dict(os.environ, {env_name: "  "}):
            assert load_env_overrides() == {}

    def test_blank_log_level_keeps_default(self, tmp_path):
        with patch.dict(os.environ, {"REPORT_FILTER_LOG_LEVEL": ""}):
            config = build_unified_config(repo_path=str(tmp_path))
        assert config["log_level"] == "WARNING"
        assert not [i for i in validate_config(config) if i.startswith("ERROR")]


class TestCoerce:
    def test_unknown_type_tag_rejected(self):
        with pytest.raises(ValueError, match="unknown type tag"):
            _coerce("value", "float")

    def test_upper(self):
        assert _coerce(" info", "upper") == "INFO"

    def test_str_kept_verbatim(self):
        assert _coerce("ci/white list.json", "str") == "ci/white list.json"


# ============================================================================
# Test extract_cli_overrides / merge_layers
# ============================================================================


class TestExtractCliOverrides:
    def test_none_args(self):
        assert extract_cli_overrides(None) == {}

    def test_explicit_whitelist(self):
        assert extract_cli_overrides(Namespace(whitelist="x.json")) == {"whitelist_path": "x.json"}

    def test_unset_whitelist_excluded(self):
        assert extract_cli_overrides(Namespace(whitelist=None)) == {}


class TestMergeLayers:
    def test_none_skipped(self):
        assert merge_layers({"a": 1}, {"a": None, "b": 2}) == {"a": 1, "b": 2}

    def test_base_unchanged(self):
        base = {"a": 1}
        merge_layers(base, {"a": 2})
        assert base == {"a": 1}


# ============================================================================
# Test .report-filter.yml
# ============================================================================


class TestLoadProjectConfig:
    def test_missing_file(self, tmp_path):
        assert load_project_config(str(tmp_path)) == {}

    def test_known_keys(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text(
            "whitelist_path: security/whitelist.json\non_malformed_finding: fail\n"
        )
        assert load_project_config(str(tmp_path)) == {
            "whitelist_path": "security/whitelist.json",
            "on_malformed_finding": "fail",
        }

    def test_unknown_keys_dropped(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("colour: blue\nlog_level: INFO\n")
        assert load_project_config(str(tmp_path)) == {"log_level": "INFO"}

    def test_empty_file(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("")
        assert load_project_config(str(tmp_path)) == {}

    def test_invalid_yaml(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("whitelist_path: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_project_config(str(tmp_path))

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_project_config(str(tmp_path))


# ============================================================================
# Test build_unified_config
# ============================================================================


class TestBuildUnifiedConfig:
    def test_defaults_only(self, tmp_path):
        assert build_unified_config(repo_path=str(tmp_path)) == get_default_config()

    def test_project_file_over_defaults(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("whitelist_path: from-yml.json\n")
        assert build_unified_config(repo_path=str(tmp_path))["whitelist_path"] == "from-yml.json"

    def test_env_over_project_file(self, tmp_path):
        (tmp_path / ".report-filter.yml").write_text("whitelist_path: from-yml.json\n")
        with patch.dict(os.environ, {"REPORT_FILTER_WHITELIST": "from-env.json"}):
            config = build_unified_config(repo_path=str(tmp_path))
        assert config["whitelist_path"] == "from-env.json"

    def test_cli_over_env(self, tmp_path):
        with patch.dict(os.environ, {"REPORT_FILTER_WHITELIST": "from-env.json"}):
            config = build_unified_config(
                cli_args=Namespace(whitelist="from-cli.json"), repo_path=str(tmp_path)
            )
        assert config["whitelist_path"] == "from-cli.json"

    def test_unset_cli_flag_keeps_lower_layers(self, tmp_path):
        with patch.dict(os.environ, {"REPORT_FILTER_ON_MALFORMED": "fail"}):
            config = build_unified_config(cli_args=Namespace(whitelist=None), repo_path=str(tmp_path))
        assert config["whitelist_path"] == "whitelist.json"
        assert config["on_malformed_finding"] == "fail"


# ============================================================================
# Test validate_config
# ============================================================================


class TestValidateConfig:
    def test_valid_config(self, tmp_path):
        whitelist = tmp_path / "whitelist.json"
        whitelist.write_text("{}")
        config = dict(get_default_config(), whitelist_path=str(whitelist))
        assert validate_config(config) == []

    def test_missing_whitelist_is_warning(self, tmp_path):
        config = dict(get_default_config(), whitelist_path=str(tmp_path / "absent.json"))
        issues = validate_config(config)
        assert len(issues) == 1
        assert issues[0].startswith("WARNING")

    def test_invalid_policy(self):
        issues = validate_config(dict(get_default_config(), on_malformed_finding="drop"))
        assert any(issue.startswith("ERROR") and "on_malformed_finding" in issue for issue in issues)

    def test_invalid_log_level(self):
        issues = validate_config(dict(get_default_config(), log_level="LOUD"))
        assert any(issue.startswith("ERROR") and "log_level" in issue for issue in issues)

    def test_non_string_whitelist_path(self):
        issues = validate_config(dict(get_default_config(), whitelist_path=42))
        assert any(issue.startswith("ERROR") and "whitelist_path" in issue for issue in issues)
