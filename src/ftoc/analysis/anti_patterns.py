from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from ftoc.analysis.detector_contract import (
    DetectionContext,
    Detector,
    register_detector,
    registered_detectors,
    run_detectors,
)
from ftoc.analysis.language import (
    StepCategory,
    Tense,
    classify_steps,
    find_ambiguous_pronoun,
    find_joining_conjunction,
    first_match,
    is_bullet_only,
    step_tense,
)
from ftoc.config import WarningConfiguration
from ftoc.model.feature import Feature, Scenario
from ftoc.model.findings import Finding, WarningFamily, WarningType

STEP_PREVIEW_LENGTH = 50


def _preview(step: str) -> str:
    if len(step) > STEP_PREVIEW_LENGTH:
        return step[: STEP_PREVIEW_LENGTH - 3] + "..."
    return step


class _ScenarioDetector:
    """Runs ``check`` on every Scenario and Scenario Outline."""

    warning_type: WarningType

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for feature, scenario in context.scenarios(behavior_only=True):
            yield from self.check(context, feature, scenario)

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterable[Finding]:
        raise NotImplementedError


class LongScenarioDetector(_ScenarioDetector):
    warning_type = WarningType.LONG_SCENARIO

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        limit = context.config.thresholds.max_steps
        count = len(scenario.steps)
        if count > limit:
            yield context.warning(
                self.warning_type,
                f"Scenario has {count} steps (recommended maximum: {limit})",
                feature=feature,
                scenario=scenario,
            )


class TooFewStepsDetector(_ScenarioDetector):
    warning_type = WarningType.TOO_FEW_STEPS

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        minimum = context.config.thresholds.min_steps
        count = len(scenario.steps)
        if count < minimum:
            yield context.warning(
                self.warning_type,
                f"Scenario has only {count} step(s)",
                feature=feature,
                scenario=scenario,
            )


@dataclass(frozen=True)
class _MissingStepCategoryDetector(_ScenarioDetector):
    warning_type: WarningType
    category: StepCategory

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        # Scenarios written purely in bullet steps carry no Given/When/Then.
        if is_bullet_only(scenario.steps):
            return
        if self.category in classify_steps(scenario.steps):
            return
        yield context.warning(
            self.warning_type,
            f"Scenario is missing a {self.category.value} step",
            feature=feature,
            scenario=scenario,
        )


class IncorrectStepOrderDetector(_ScenarioDetector):
    warning_type = WarningType.INCORRECT_STEP_ORDER

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        seen_when = False
        seen_then = False
        for step, category in zip(scenario.steps, classify_steps(scenario.steps)):
            issue = None
            if category is StepCategory.WHEN and seen_then:
                issue = f'When step after Then step: "{step}"'
            elif category is StepCategory.GIVEN and (seen_when or seen_then):
                latest = StepCategory.THEN if seen_then else StepCategory.WHEN
                issue = f'Given step after {latest.value} step: "{step}"'
            if issue is not None:
                yield context.warning(
                    self.warning_type, issue, feature=feature, scenario=scenario
                )
            if category is StepCategory.WHEN:
                seen_when = True
            elif category is StepCategory.THEN:
                seen_then = True


@dataclass(frozen=True)
class _StepVocabularyDetector(_ScenarioDetector):
    warning_type: WarningType
    patterns_of: Callable[[WarningConfiguration], Sequence]
    template: str

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        patterns = self.patterns_of(context.config)
        for step in scenario.steps:
            if first_match(step, patterns) is not None:
                yield context.warning(
                    self.warning_type,
                    self.template.format(step=step),
                    feature=feature,
                    scenario=scenario,
                )


class MissingExamplesDetector(_ScenarioDetector):
    warning_type = WarningType.MISSING_EXAMPLES

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        if scenario.is_outline and not scenario.examples:
            yield context.warning(
                self.warning_type,
                "Scenario Outline has no Examples tables",
                feature=feature,
                scenario=scenario,
            )


class TooFewExamplesDetector(_ScenarioDetector):
    warning_type = WarningType.TOO_FEW_EXAMPLES

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        if not scenario.is_outline:
            return
        minimum = context.config.thresholds.min_examples
        for example in scenario.examples:
            rows = len(example.rows)
            if rows < minimum:
                yield context.warning(
                    self.warning_type,
                    f"Examples table '{example.name or 'unnamed'}' has only {rows} row(s) "
                    f"(recommended minimum: {minimum})",
                    feature=feature,
                    scenario=scenario,
                )


class AmbiguousPronounDetector(_ScenarioDetector):
    warning_type = WarningType.AMBIGUOUS_PRONOUN

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        pronouns = context.config.vocabulary.pronouns
        for step in scenario.steps:
            pronoun = find_ambiguous_pronoun(step, pronouns)
            if pronoun is not None:
                yield context.warning(
                    self.warning_type,
                    f"Step contains ambiguous pronoun '{pronoun}': \"{step}\"",
                    feature=feature,
                    scenario=scenario,
                )


class InconsistentTenseDetector(_ScenarioDetector):
    warning_type = WarningType.INCONSISTENT_TENSE

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        tenses = {step_tense(step) for step in scenario.steps}
        if Tense.PRESENT in tenses and Tense.PAST in tenses:
            yield context.warning(
                self.warning_type,
                "Scenario uses a mix of present and past tense",
                feature=feature,
                scenario=scenario,
            )


class ConjunctionInStepDetector(_ScenarioDetector):
    warning_type = WarningType.CONJUNCTION_IN_STEP

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        conjunctions = context.config.vocabulary.conjunctions
        for step in scenario.steps:
            conjunction = find_joining_conjunction(step, conjunctions)
            if conjunction is not None:
                yield context.warning(
                    self.warning_type,
                    f"Step contains conjunction '{conjunction}' suggesting it should be "
                    f"split: \"{step}\"",
                    feature=feature,
                    scenario=scenario,
                )


class LongScenarioNameDetector(_ScenarioDetector):
    warning_type = WarningType.LONG_SCENARIO_NAME

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        limit = context.config.thresholds.max_scenario_name_length
        length = len(scenario.name)
        if length > limit:
            yield context.warning(
                self.warning_type,
                f"Scenario name is {length} characters long (recommended maximum: {limit})",
                feature=feature,
                scenario=scenario,
            )


class LongStepTextDetector(_ScenarioDetector):
    warning_type = WarningType.LONG_STEP_TEXT

    def check(
        self, context: DetectionContext, feature: Feature, scenario: Scenario
    ) -> Iterator[Finding]:
        limit = context.config.thresholds.max_step_length
        for step in scenario.steps:
            if len(step) > limit:
                yield context.warning(
                    self.warning_type,
                    f"Step text is {len(step)} characters long (recommended maximum: "
                    f"{limit}): \"{_preview(step)}\"",
                    feature=feature,
                    scenario=scenario,
                )


DEFAULT_ANTI_PATTERN_DETECTORS: tuple[Detector, ...] = (
    LongScenarioDetector(),
    TooFewStepsDetector(),
    _MissingStepCategoryDetector(WarningType.MISSING_GIVEN, StepCategory.GIVEN),
    _MissingStepCategoryDetector(WarningType.MISSING_WHEN, StepCategory.WHEN),
    _MissingStepCategoryDetector(WarningType.MISSING_THEN, StepCategory.THEN),
    IncorrectStepOrderDetector(),
    _StepVocabularyDetector(
        WarningType.UI_FOCUSED_STEP,
        lambda config: config.vocabulary.ui_patterns,
        'Step contains UI-focused language: "{step}"',
    ),
    _StepVocabularyDetector(
        WarningType.IMPLEMENTATION_DETAIL,
        lambda config: config.vocabulary.implementation_patterns,
        'Step contains technical implementation details: "{step}"',
    ),
    MissingExamplesDetector(),
    TooFewExamplesDetector(),
    AmbiguousPronounDetector(),
    InconsistentTenseDetector(),
    ConjunctionInStepDetector(),
    LongScenarioNameDetector(),
    LongStepTextDetector(),
)

for _detector in DEFAULT_ANTI_PATTERN_DETECTORS:
    register_detector(_detector, WarningFamily.ANTI_PATTERN)


def analyze_anti_patterns(
    features: Sequence[Feature],
    config: WarningConfiguration | None = None,
    *,
    detectors: Iterable[Detector] | None = None,
) -> list[Finding]:
    context = DetectionContext.build(features, config)
    chosen = (
        registered_detectors(WarningFamily.ANTI_PATTERN) if detectors is None else detectors
    )
    return run_detectors(context, chosen)
