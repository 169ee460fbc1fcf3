"""Finding types shared by the tag-quality and anti-pattern analyzers.

Type names (the enum values) and message templates are a stable surface:
downstream CI tooling matches on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ftoc.model.feature import Feature, Scenario


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    HINT = "HINT"

    @classmethod
    def parse(cls, value: object, default: "Severity | None" = None) -> "Severity":
        fallback = default if default is not None else cls.WARNING
        if isinstance(value, Severity):
            return value
        if not isinstance(value, str):
            return fallback
        try:
            return cls(value.strip().upper())
        except ValueError:
            return fallback


class WarningFamily(str, Enum):
    TAG_QUALITY = "tag_quality"
    ANTI_PATTERN = "anti_patterns"


class WarningType(str, Enum):
    MISSING_PRIORITY_TAG = "MISSING_PRIORITY_TAG"
    MISSING_TYPE_TAG = "MISSING_TYPE_TAG"
    LOW_VALUE_TAG = "LOW_VALUE_TAG"
    DUPLICATE_TAG = "DUPLICATE_TAG"
    EXCESSIVE_TAGS = "EXCESSIVE_TAGS"
    ORPHANED_TAG = "ORPHANED_TAG"
    TAG_TYPO = "TAG_TYPO"
    INCONSISTENT_TAGGING = "INCONSISTENT_TAGGING"
    AMBIGUOUS_TAG = "AMBIGUOUS_TAG"
    TOO_GENERIC_TAG = "TOO_GENERIC_TAG"

    LONG_SCENARIO = "LONG_SCENARIO"
    TOO_FEW_STEPS = "TOO_FEW_STEPS"
    MISSING_GIVEN = "MISSING_GIVEN"
    MISSING_WHEN = "MISSING_WHEN"
    MISSING_THEN = "MISSING_THEN"
    INCORRECT_STEP_ORDER = "INCORRECT_STEP_ORDER"
    UI_FOCUSED_STEP = "UI_FOCUSED_STEP"
    IMPLEMENTATION_DETAIL = "IMPLEMENTATION_DETAIL"
    MISSING_EXAMPLES = "MISSING_EXAMPLES"
    TOO_FEW_EXAMPLES = "TOO_FEW_EXAMPLES"
    AMBIGUOUS_PRONOUN = "AMBIGUOUS_PRONOUN"
    INCONSISTENT_TENSE = "INCONSISTENT_TENSE"
    CONJUNCTION_IN_STEP = "CONJUNCTION_IN_STEP"
    LONG_SCENARIO_NAME = "LONG_SCENARIO_NAME"
    LONG_STEP_TEXT = "LONG_STEP_TEXT"

    @property
    def family(self) -> WarningFamily:
        return _TYPE_INFO[self].family

    @property
    def description(self) -> str:
        return _TYPE_INFO[self].description

    @property
    def default_severity(self) -> Severity:
        return _TYPE_INFO[self].severity

    @property
    def remediation(self) -> tuple[str, ...]:
        return _TYPE_INFO[self].remediation

    @classmethod
    def lookup(cls, name: str) -> "WarningType | None":
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None

    @classmethod
    def for_family(cls, family: WarningFamily) -> tuple["WarningType", ...]:
        return tuple(member for member in cls if member.family is family)


@dataclass(frozen=True)
class _TypeInfo:
    family: WarningFamily
    description: str
    severity: Severity
    remediation: tuple[str, ...]


_TAG = WarningFamily.TAG_QUALITY
_ANTI = WarningFamily.ANTI_PATTERN

_TYPE_INFO: dict[WarningType, _TypeInfo] = {
    WarningType.MISSING_PRIORITY_TAG: _TypeInfo(
        _TAG,
        "Missing priority tag",
        Severity.ERROR,
        (
            "Add a priority tag like @P0 (highest), @P1, @P2, or @P3 (lowest)",
            "Alternatively, add a semantic priority tag like @Critical, @High, @Medium, or @Low",
        ),
    ),
    WarningType.MISSING_TYPE_TAG: _TypeInfo(
        _TAG,
        "Missing type tag",
        Severity.WARNING,
        (
            "Add a type tag that describes the test type (e.g., @UI, @API, @Integration)",
            "Type tags help with test selection and organization",
        ),
    ),
    WarningType.LOW_VALUE_TAG: _TypeInfo(
        _TAG,
        "Low-value tag",
        Severity.INFO,
        (
            "Replace with more specific, meaningful tags",
            "Tags should help with test selection and documentation",
        ),
    ),
    WarningType.DUPLICATE_TAG: _TypeInfo(
        _TAG,
        "Duplicate tag",
        Severity.ERROR,
        (
            "Remove duplicate tags",
            "Tags at the feature level apply to all scenarios",
        ),
    ),
    WarningType.EXCESSIVE_TAGS: _TypeInfo(
        _TAG,
        "Excessive tags",
        Severity.WARNING,
        (
            "Consolidate similar tags",
            "Ensure tags serve a clear purpose (selection, documentation, or automation)",
        ),
    ),
    WarningType.ORPHANED_TAG: _TypeInfo(
        _TAG,
        "Orphaned tag (used only once)",
        Severity.INFO,
        (
            "Tags used only once don't help group related scenarios",
            "Check if it should be consistent with other similar tags",
        ),
    ),
    WarningType.TAG_TYPO: _TypeInfo(
        _TAG,
        "Possible tag typo",
        Severity.WARNING,
        (
            "Standardize on a single spelling",
            "Correct the tag spelling for consistency",
        ),
    ),
    WarningType.INCONSISTENT_TAGGING: _TypeInfo(
        _TAG,
        "Inconsistent tagging",
        Severity.WARNING,
        (
            "Standardize on a single priority tag style (e.g., @P0-@P3 or @Critical/@High/@Medium/@Low)",
            "Document the preferred tag style in a team guideline",
        ),
    ),
    WarningType.AMBIGUOUS_TAG: _TypeInfo(
        _TAG,
        "Ambiguous tag",
        Severity.WARNING,
        (
            "Use more descriptive tag names",
            "Short tags are hard to understand and maintain",
        ),
    ),
    WarningType.TOO_GENERIC_TAG: _TypeInfo(
        _TAG,
        "Too generic tag",
        Severity.INFO,
        (
            "Overly common tags don't help discriminate between tests",
            "If a tag is needed on most features, make it a convention rather than a tag",
        ),
    ),
    WarningType.LONG_SCENARIO: _TypeInfo(
        _ANTI,
        "Long scenario",
        Severity.WARNING,
        (
            "Break the scenario into multiple smaller, focused scenarios",
            "Consider using a Background for shared setup steps",
        ),
    ),
    WarningType.TOO_FEW_STEPS: _TypeInfo(
        _ANTI,
        "Too few steps",
        Severity.WARNING,
        (
            "A complete scenario typically needs at least setup (Given) and verification (Then) steps",
        ),
    ),
    WarningType.MISSING_GIVEN: _TypeInfo(
        _ANTI,
        "Missing Given step",
        Severity.ERROR,
        ("Add a Given step to establish the initial context/state",),
    ),
    WarningType.MISSING_WHEN: _TypeInfo(
        _ANTI,
        "Missing When step",
        Severity.ERROR,
        ("Add a When step to describe the action being tested",),
    ),
    WarningType.MISSING_THEN: _TypeInfo(
        _ANTI,
        "Missing Then step",
        Severity.ERROR,
        ("Add a Then step to verify the expected outcome",),
    ),
    WarningType.INCORRECT_STEP_ORDER: _TypeInfo(
        _ANTI,
        "Incorrect step order",
        Severity.ERROR,
        (
            "Follow the Given-When-Then sequence (setup, action, verification)",
            "Consider splitting the scenario if the flow doesn't fit the pattern",
        ),
    ),
    WarningType.UI_FOCUSED_STEP: _TypeInfo(
        _ANTI,
        "UI-focused step",
        Severity.WARNING,
        (
            "Focus on the business behavior rather than UI implementation",
            'Example: Instead of "When I click the Submit button", use "When I submit the form"',
        ),
    ),
    WarningType.IMPLEMENTATION_DETAIL: _TypeInfo(
        _ANTI,
        "Implementation detail in step",
        Severity.WARNING,
        (
            "Remove technical implementation details from scenario steps",
            'Example: Instead of "When the API returns 200 OK", use "When the operation succeeds"',
        ),
    ),
    WarningType.MISSING_EXAMPLES: _TypeInfo(
        _ANTI,
        "Missing examples in Scenario Outline",
        Severity.ERROR,
        ("Add at least one Examples table to the Scenario Outline",),
    ),
    WarningType.TOO_FEW_EXAMPLES: _TypeInfo(
        _ANTI,
        "Too few examples in Scenario Outline",
        Severity.WARNING,
        (
            "Add more example rows to better test the scenario variations",
            "Consider boundary values and edge cases",
        ),
    ),
    WarningType.AMBIGUOUS_PRONOUN: _TypeInfo(
        _ANTI,
        "Ambiguous pronoun in step",
        Severity.WARNING,
        (
            "Use specific nouns instead of pronouns for clarity",
            'Example: Instead of "When I click it", use "When I click the button"',
        ),
    ),
    WarningType.INCONSISTENT_TENSE: _TypeInfo(
        _ANTI,
        "Inconsistent tense in steps",
        Severity.WARNING,
        (
            "Standardize on a single tense throughout the scenario",
            'Present tense is generally preferred ("I click" rather than "I clicked")',
        ),
    ),
    WarningType.CONJUNCTION_IN_STEP: _TypeInfo(
        _ANTI,
        "Conjunction in step",
        Severity.WARNING,
        (
            "Split steps with conjunctions into separate steps",
            "Each step should describe a single action or assertion",
        ),
    ),
    WarningType.LONG_SCENARIO_NAME: _TypeInfo(
        _ANTI,
        "Long scenario name",
        Severity.INFO,
        ("Shorten the scenario name and move details into the steps",),
    ),
    WarningType.LONG_STEP_TEXT: _TypeInfo(
        _ANTI,
        "Long step text",
        Severity.INFO,
        ("Move complex data to examples, a DocString, or a DataTable",),
    ),
}


@dataclass(frozen=True)
class Finding:
    type: WarningType
    severity: Severity
    message: str
    feature_path: str = ""
    feature_name: str = ""
    scenario_name: str | None = None
    scenario_line: int | None = None
    alternatives: tuple[str, ...] = ()

    @classmethod
    def at(
        cls,
        warning_type: WarningType,
        severity: Severity,
        message: str,
        *,
        feature: Feature | None = None,
        scenario: Scenario | None = None,
        alternatives: tuple[str, ...] = (),
    ) -> "Finding":
        return cls(
            type=warning_type,
            severity=severity,
            message=message,
            feature_path=feature.path if feature is not None else "",
            feature_name=feature.name if feature is not None else "",
            scenario_name=scenario.name if scenario is not None else None,
            scenario_line=scenario.line if scenario is not None else None,
            alternatives=tuple(alternatives),
        )

    @property
    def location(self) -> str:
        filename = self.feature_path.replace("\\", "/").rsplit("/", 1)[-1]
        if self.scenario_name is not None:
            return f"{filename} - {self.scenario_name}" if filename else self.scenario_name
        return filename

    @property
    def sort_key(self) -> tuple[str, int, str, str]:
        return (
            self.feature_path,
            self.scenario_line if self.scenario_line is not None else 0,
            self.type.value,
            self.message,
        )

    def __str__(self) -> str:
        text = f"{self.severity.value}: {self.type.description}: {self.message}"
        if self.location:
            text += f" (in {self.location})"
        return text
