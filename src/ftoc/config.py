from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, TypeAlias
import tomllib

from pydantic import ValidationError

from ftoc.exceptions import ConfigurationError, InvalidTag
from ftoc.model.findings import Severity, WarningFamily, WarningType
from ftoc.model.tags import DEFAULT_TAXONOMY, Tag, TagTaxonomy
from ftoc.schema import ConfigDocumentDTO, WarningSettingDTO

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "ftoc.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeError) as exc:
        logger.warning("Cannot read configuration %s (%s); using defaults", path, exc)
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("Malformed configuration %s (%s); using defaults", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    data = _load_toml(config_path)
    if data:
        logger.info("Loaded configuration from %s", config_path)
    return data


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


DEFAULT_LOW_VALUE_TAGS: tuple[str, ...] = (
    "@Test", "@Tests", "@Feature", "@Cucumber", "@Scenario", "@Gherkin",
    "@Temp", "@Temporary", "@Pending", "@Fixme", "@Workaround", "@Ignore",
    "@Skip", "@Manual",
)

_DEFAULT_ALTERNATIVES: dict[WarningType, tuple[str, ...]] = {
    WarningType.MISSING_PRIORITY_TAG: (
        "@P0", "@P1", "@P2", "@P3", "@Critical", "@High", "@Medium", "@Low",
    ),
    WarningType.MISSING_TYPE_TAG: (
        "@UI", "@API", "@Backend", "@Frontend", "@Integration", "@Unit",
        "@Performance", "@Security",
    ),
    WarningType.LOW_VALUE_TAG: ("@Smoke", "@Regression", "@Integration", "@E2E"),
}

DEFAULT_UI_PATTERNS: tuple[str, ...] = (
    r"click(s|ed|ing)?\s+(on\s+)?the\s+",
    r"select(s|ed|ing)?\s+(from\s+)?the\s+",
    r"enter(s|ed|ing)?\s+.+\s+into\s+the\s+",
    r"type(s|ed|ing)?\s+.+\s+into\s+the\s+",
    r"navigate(s|ed|ing)?\s+to\s+",
    r"scroll(s|ed|ing)?\s+(down|up|to)\s+",
    r"hover(s|ed|ing)?\s+over\s+the\s+",
    r"drag(s|ed|ing)?\s+.+\s+to\s+",
    r"check(s|ed|ing)?\s+the\s+checkbox",
    r"upload(s|ed|ing)?\s+file",
)

DEFAULT_IMPLEMENTATION_PATTERNS: tuple[str, ...] = (
    r"\bjs\b|javascript",
    r"\bcss\b|stylesheet",
    r"\bapi\s+endpoint",
    r"\bhttp\b|\burl\b|\buri\b",
    r"\bdatabase\b|\bsql\b|\bquery\b",
    r"\belement\s+id\b|\bxpath\b|\bcss\s+selector\b",
    r"\bwait\s+for\b|\btimeout\b|\bdelay\b",
)

DEFAULT_PRONOUNS: tuple[str, ...] = ("it", "they", "them", "this", "that", "these", "those")

DEFAULT_CONJUNCTIONS: tuple[str, ...] = ("and", "but")


@dataclass(frozen=True)
class WarningSetting:
    enabled: bool = True
    severity: Severity = Severity.WARNING
    alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class Thresholds:
    max_steps: int = 10
    min_steps: int = 2
    min_examples: int = 2
    max_tags: int = 6
    max_scenario_name_length: int = 100
    max_step_length: int = 120


def _compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.warning("Ignoring invalid vocabulary pattern %r: %s", pattern, exc)
    return tuple(compiled)


@dataclass(frozen=True)
class Vocabulary:
    ui_patterns: tuple[re.Pattern[str], ...] = field(
        default_factory=lambda: _compile_patterns(DEFAULT_UI_PATTERNS)
    )
    implementation_patterns: tuple[re.Pattern[str], ...] = field(
        default_factory=lambda: _compile_patterns(DEFAULT_IMPLEMENTATION_PATTERNS)
    )
    pronouns: frozenset[str] = frozenset(DEFAULT_PRONOUNS)
    conjunctions: frozenset[str] = frozenset(DEFAULT_CONJUNCTIONS)


def _default_settings() -> dict[WarningType, WarningSetting]:
    return {
        warning_type: WarningSetting(
            enabled=True,
            severity=warning_type.default_severity,
            alternatives=_DEFAULT_ALTERNATIVES.get(warning_type, ()),
        )
        for warning_type in WarningType
    }


def _tag_set(names: Iterable[str]) -> frozenset[Tag]:
    tags: set[Tag] = set()
    for name in names:
        try:
            tags.add(Tag.of(name))
        except InvalidTag:
            continue
    return frozenset(tags)


@dataclass(frozen=True)
class WarningConfiguration:
    """Everything the analyzers read: toggles, severities, thresholds, word lists.

    Built once per run and passed explicitly into every analyzer call.
    """

    settings: Mapping[WarningType, WarningSetting] = field(
        default_factory=lambda: MappingProxyType(_default_settings())
    )
    thresholds: Thresholds = field(default_factory=Thresholds)
    taxonomy: TagTaxonomy = DEFAULT_TAXONOMY
    low_value_tags: frozenset[Tag] = field(
        default_factory=lambda: _tag_set(DEFAULT_LOW_VALUE_TAGS)
    )
    vocabulary: Vocabulary = field(default_factory=Vocabulary)

    def __post_init__(self) -> None:
        merged = _default_settings()
        merged.update(self.settings)
        object.__setattr__(self, "settings", MappingProxyType(merged))

    @classmethod
    def defaults(cls) -> "WarningConfiguration":
        return cls()

    def setting(self, warning_type: WarningType) -> WarningSetting:
        return self.settings[warning_type]

    def is_enabled(self, warning_type: WarningType) -> bool:
        return self.settings[warning_type].enabled

    def severity_for(self, warning_type: WarningType) -> Severity:
        return self.settings[warning_type].severity

    def alternatives_for(self, warning_type: WarningType) -> tuple[str, ...]:
        return self.settings[warning_type].alternatives

    def is_low_value(self, tag: Tag) -> bool:
        return tag in self.low_value_tags

    def with_disabled(self, *warning_types: WarningType) -> "WarningConfiguration":
        settings = dict(self.settings)
        for warning_type in warning_types:
            settings[warning_type] = replace(settings[warning_type], enabled=False)
        return replace(self, settings=settings)

    def with_thresholds(self, **overrides: int) -> "WarningConfiguration":
        return replace(self, thresholds=replace(self.thresholds, **overrides))


def _apply_setting(
    warning_type: WarningType,
    base: WarningSetting,
    override: bool | WarningSettingDTO,
) -> WarningSetting:
    if isinstance(override, bool):
        return replace(base, enabled=override)
    enabled = base.enabled if override.enabled is None else override.enabled
    severity = base.severity
    if override.severity is not None:
        severity = Severity.parse(override.severity)
        if severity.value != override.severity.strip().upper():
            logger.warning(
                "Unknown severity %r for %s; using %s",
                override.severity,
                warning_type.value,
                severity.value,
            )
    alternatives = base.alternatives
    if override.alternatives is not None:
        alternatives = tuple(_normalize_name_list(override.alternatives))
    return WarningSetting(enabled=enabled, severity=severity, alternatives=alternatives)


def _resolve_settings(document: ConfigDocumentDTO) -> dict[WarningType, WarningSetting]:
    settings = _default_settings()
    families = (
        (WarningFamily.TAG_QUALITY, document.warnings.tag_quality),
        (WarningFamily.ANTI_PATTERN, document.warnings.anti_patterns),
    )
    for family, section in families:
        for name, override in section.items():
            warning_type = WarningType.lookup(name)
            if warning_type is None:
                logger.info("Ignoring unknown warning type %r in [warnings.%s]", name, family.value)
                continue
            if warning_type.family is not family:
                logger.info(
                    "Warning type %s configured under [warnings.%s]; applying it anyway",
                    warning_type.value,
                    family.value,
                )
            settings[warning_type] = _apply_setting(
                warning_type, settings[warning_type], override
            )
    for name in _normalize_name_list(document.warnings.disabled):
        warning_type = WarningType.lookup(name)
        if warning_type is None:
            logger.info("Ignoring unknown warning type %r in warnings.disabled", name)
            continue
        settings[warning_type] = replace(settings[warning_type], enabled=False)
    return settings


def _resolve_thresholds(document: ConfigDocumentDTO) -> Thresholds:
    overrides: dict[str, int] = {}
    for name, value in document.thresholds.model_dump().items():
        if value is None:
            continue
        if value < 0:
            logger.warning("Ignoring negative threshold %s=%d", name, value)
            continue
        overrides[name] = value
    return replace(Thresholds(), **overrides)


def _resolve_vocabulary(document: ConfigDocumentDTO) -> Vocabulary:
    section = document.vocabulary
    defaults = Vocabulary()
    return Vocabulary(
        ui_patterns=_compile_patterns(section.ui_patterns) or defaults.ui_patterns,
        implementation_patterns=(
            _compile_patterns(section.implementation_patterns)
            or defaults.implementation_patterns
        ),
        pronouns=frozenset(word.casefold() for word in _normalize_name_list(section.pronouns))
        or defaults.pronouns,
        conjunctions=frozenset(
            word.casefold() for word in _normalize_name_list(section.conjunctions)
        )
        or defaults.conjunctions,
    )


def validate_document(table: TomlTable) -> ConfigDocumentDTO:
    try:
        return ConfigDocumentDTO.model_validate(table)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def warning_configuration_from_table(table: TomlTable | None) -> WarningConfiguration:
    """Build a configuration from a parsed document; invalid documents give defaults."""
    if not table:
        return WarningConfiguration.defaults()
    try:
        document = validate_document(table)
    except ConfigurationError as exc:
        logger.warning("Invalid configuration document; using defaults: %s", exc)
        return WarningConfiguration.defaults()
    tags = document.tags
    taxonomy = DEFAULT_TAXONOMY.with_overrides(
        priority=_normalize_name_list(tags.priority),
        type=_normalize_name_list(tags.type),
        status=_normalize_name_list(tags.status),
    )
    low_value = _tag_set(_normalize_name_list(tags.low_value)) or _tag_set(
        DEFAULT_LOW_VALUE_TAGS
    )
    return WarningConfiguration(
        settings=_resolve_settings(document),
        thresholds=_resolve_thresholds(document),
        taxonomy=taxonomy,
        low_value_tags=low_value,
        vocabulary=_resolve_vocabulary(document),
    )


def load_warning_configuration(
    root: Path | None = None,
    config_path: Path | None = None,
    *,
    overrides: TomlTable | None = None,
) -> WarningConfiguration:
    """Load ``ftoc.toml``; top-level sections in ``overrides`` replace the file's."""
    table = load_config(root=root, config_path=config_path)
    if overrides:
        table = merge_payload(overrides, table)
    return warning_configuration_from_table(table)
