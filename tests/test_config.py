from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from ftoc import config
from ftoc.config import (
    DEFAULT_UI_PATTERNS,
    Thresholds,
    WarningConfiguration,
    load_warning_configuration,
    validate_document,
    warning_configuration_from_table,
)
from ftoc.exceptions import ConfigurationError
from ftoc.model.findings import Severity, WarningType
from ftoc.model.tags import Tag, TagCategory

FULL_CONFIG = textwrap.dedent(
    """
    [warnings]
    disabled = ["ORPHANED_TAG"]

    [warnings.tag_quality]
    MISSING_TYPE_TAG = false
    TAG_TYPO = { severity = "error", alternatives = ["@Regression"] }

    [warnings.anti_patterns]
    LONG_SCENARIO = { severity = "info" }
    NOT_A_WARNING = true

    [tags]
    priority = ["@Urgent", "@Later"]
    low_value = ["@Junk"]

    [thresholds]
    max_steps = 4
    min_examples = -1

    [vocabulary]
    pronouns = ["it"]
    ui_patterns = ["press(es|ed)? the"]
    """
).lstrip("\n")


def _write_config(root: Path, content: str) -> Path:
    path = root / config.DEFAULT_CONFIG_NAME
    path.write_text(content, encoding="utf-8")
    return path


def test_load_toml_missing_and_invalid(tmp_path: Path) -> None:
    assert config._load_toml(tmp_path / "missing.toml") == {}

    invalid = tmp_path / "invalid.toml"
    invalid.write_text("not = [toml", encoding="utf-8")
    assert config._load_toml(invalid) == {}

    assert config._load_toml(tmp_path) == {}


def test_load_config_default_path(tmp_path: Path) -> None:
    _write_config(tmp_path, "[thresholds]\nmax_steps = 7\n")
    data = config.load_config(root=tmp_path, config_path=None)
    assert data["thresholds"]["max_steps"] == 7


def test_normalize_name_list_and_merge_payload() -> None:
    assert config._normalize_name_list(["a, b", "c"]) == ["a", "b", "c"]
    assert config._normalize_name_list("x,y") == ["x", "y"]
    assert config._normalize_name_list(None) == []
    merged = config.merge_payload({"a": None, "b": 2}, {"a": 1, "b": 1, "c": 3})
    assert merged == {"a": 1, "b": 2, "c": 3}


def test_defaults() -> None:
    defaults = WarningConfiguration.defaults()
    assert defaults.severity_for(WarningType.MISSING_PRIORITY_TAG) is Severity.ERROR
    assert defaults.severity_for(WarningType.LOW_VALUE_TAG) is Severity.INFO
    assert all(defaults.is_enabled(warning_type) for warning_type in WarningType)
    assert defaults.thresholds == Thresholds()
    assert defaults.thresholds.max_steps == 10
    assert defaults.is_low_value(Tag.of("@test"))
    assert not defaults.is_low_value(Tag.of("@Smoke"))
    assert "@Regression" in defaults.alternatives_for(WarningType.LOW_VALUE_TAG)


def test_full_document_resolution(tmp_path: Path) -> None:
    _write_config(tmp_path, FULL_CONFIG)
    resolved = load_warning_configuration(root=tmp_path)

    assert not resolved.is_enabled(WarningType.ORPHANED_TAG)
    assert not resolved.is_enabled(WarningType.MISSING_TYPE_TAG)
    assert resolved.is_enabled(WarningType.MISSING_PRIORITY_TAG)
    assert resolved.severity_for(WarningType.TAG_TYPO) is Severity.ERROR
    assert resolved.alternatives_for(WarningType.TAG_TYPO) == ("@Regression",)
    assert resolved.severity_for(WarningType.LONG_SCENARIO) is Severity.INFO

    assert resolved.thresholds.max_steps == 4
    assert resolved.thresholds.min_examples == 2

    assert Tag.of("@urgent").category(resolved.taxonomy) is TagCategory.PRIORITY
    assert Tag.of("@P1").category(resolved.taxonomy) is TagCategory.OTHER
    assert Tag.of("@API").category(resolved.taxonomy) is TagCategory.TYPE
    assert resolved.low_value_tags == frozenset({Tag.of("@Junk")})

    assert resolved.vocabulary.pronouns == frozenset({"it"})
    assert len(resolved.vocabulary.ui_patterns) == 1
    assert resolved.vocabulary.ui_patterns[0].search("When I PRESS the button")
    assert resolved.vocabulary.conjunctions == frozenset({"and", "but"})


def test_unknown_severity_falls_back_to_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="ftoc.config"):
        resolved = warning_configuration_from_table(
            {"warnings": {"anti_patterns": {"LONG_STEP_TEXT": {"severity": "loud"}}}}
        )
    assert resolved.severity_for(WarningType.LONG_STEP_TEXT) is Severity.WARNING
    assert resolved.is_enabled(WarningType.LONG_STEP_TEXT)
    assert "Unknown severity 'loud' for LONG_STEP_TEXT" in caplog.text


def test_known_severity_is_case_insensitive_and_quiet(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="ftoc.config"):
        resolved = warning_configuration_from_table(
            {"warnings": {"anti_patterns": {"LONG_STEP_TEXT": {"severity": " hint "}}}}
        )
    assert resolved.severity_for(WarningType.LONG_STEP_TEXT) is Severity.HINT
    assert "Unknown severity" not in caplog.text


def test_type_under_other_family_still_applies() -> None:
    resolved = warning_configuration_from_table(
        {"warnings": {"tag_quality": {"LONG_SCENARIO": False}}}
    )
    assert not resolved.is_enabled(WarningType.LONG_SCENARIO)


def test_invalid_document_gives_defaults() -> None:
    table = {"thresholds": {"max_steps": "many"}}
    with pytest.raises(ConfigurationError):
        validate_document(table)
    resolved = warning_configuration_from_table(table)
    assert resolved.thresholds == Thresholds()


def test_invalid_patterns_keep_defaults() -> None:
    resolved = warning_configuration_from_table({"vocabulary": {"ui_patterns": ["(unclosed"]}})
    assert len(resolved.vocabulary.ui_patterns) == len(DEFAULT_UI_PATTERNS)


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    resolved = load_warning_configuration(root=tmp_path)
    assert resolved.thresholds == Thresholds()
    assert dict(resolved.settings) == dict(WarningConfiguration.defaults().settings)


def test_malformed_file_gives_defaults(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "[thresholds\nmax_steps = 3\n")
    resolved = load_warning_configuration(config_path=path)
    assert resolved.thresholds == Thresholds()


def test_overrides_replace_file_sections(tmp_path: Path) -> None:
    _write_config(tmp_path, "[thresholds]\nmax_steps = 7\nmin_steps = 1\n")
    resolved = load_warning_configuration(
        root=tmp_path, overrides={"thresholds": {"max_steps": 3}}
    )
    assert resolved.thresholds.max_steps == 3
    assert resolved.thresholds.min_steps == 2


def test_with_helpers_return_new_values() -> None:
    defaults = WarningConfiguration.defaults()
    narrowed = defaults.with_disabled(WarningType.TAG_TYPO).with_thresholds(max_tags=2)
    assert not narrowed.is_enabled(WarningType.TAG_TYPO)
    assert narrowed.thresholds.max_tags == 2
    assert defaults.is_enabled(WarningType.TAG_TYPO)
    assert defaults.thresholds.max_tags == 6
