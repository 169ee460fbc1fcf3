"""Tag hygiene detectors.

Scenario-level detectors look at a scenario's effective tags (its own plus
the feature's). Corpus-level detectors work from the concordance and point at
the first place the tag is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from ftoc.analysis.detector_contract import (
    DetectionContext,
    Detector,
    register_detector,
    registered_detectors,
    run_detectors,
)
from ftoc.analysis.language import priority_style
from ftoc.config import WarningConfiguration
from ftoc.model.concordance import TagConcordance
from ftoc.model.feature import Feature, Scenario
from ftoc.model.findings import Finding, WarningFamily, WarningType
from ftoc.model.tags import SIGIL, Tag, TagCategory

AMBIGUOUS_TAG_MAX_LENGTH = 2
GENERIC_TAG_RATIO = 0.9
GENERIC_TAG_MIN_FEATURES = 5


def _first_occurrence(
    features: Sequence[Feature], tag: Tag
) -> tuple[Feature | None, Scenario | None]:
    for feature in features:
        if tag in feature.tags:
            return feature, None
        for scenario in feature.scenarios:
            if tag in scenario.tags:
                return feature, scenario
    return None, None


def _duplicates(tags: Iterable[Tag]) -> list[Tag]:
    seen: set[Tag] = set()
    repeated: dict[Tag, None] = {}
    for tag in tags:
        if tag in seen:
            repeated.setdefault(tag, None)
        seen.add(tag)
    return list(repeated)


def _names(tags: Iterable[Tag]) -> str:
    return ", ".join(tag.name for tag in tags)


@dataclass(frozen=True)
class _MissingCategoryDetector:
    warning_type: WarningType
    category: TagCategory
    label: str

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for feature, scenario in context.scenarios(behavior_only=True):
            tags = feature.effective_tags(scenario)
            if any(tag.category(context.taxonomy) is self.category for tag in tags):
                continue
            yield context.warning(
                self.warning_type,
                f"Scenario is missing a {self.label} tag",
                feature=feature,
                scenario=scenario,
            )


class LowValueTagDetector:
    warning_type = WarningType.LOW_VALUE_TAG

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        config = context.config
        for feature in context.features:
            for tag in dict.fromkeys(feature.tags):
                if config.is_low_value(tag):
                    yield self._warning(context, tag, feature, None)
            for scenario in feature.scenarios:
                if scenario.is_background:
                    continue
                for tag in dict.fromkeys(scenario.tags):
                    if config.is_low_value(tag):
                        yield self._warning(context, tag, feature, scenario)

    def _warning(
        self,
        context: DetectionContext,
        tag: Tag,
        feature: Feature,
        scenario: Scenario | None,
    ) -> Finding:
        return context.warning(
            self.warning_type,
            f"'{tag.name}' is a known low-value tag that doesn't provide useful context",
            feature=feature,
            scenario=scenario,
        )


class DuplicateTagDetector:
    warning_type = WarningType.DUPLICATE_TAG

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for feature in context.features:
            feature_duplicates = _duplicates(feature.tags)
            if feature_duplicates:
                yield context.warning(
                    self.warning_type,
                    f"Feature has duplicate tags: {_names(feature_duplicates)}",
                    feature=feature,
                )
            feature_tags = set(feature.tags)
            for scenario in feature.scenarios:
                if scenario.is_background:
                    continue
                parts = [tag.name for tag in _duplicates(scenario.tags)]
                for tag in dict.fromkeys(scenario.tags):
                    if tag in feature_tags:
                        parts.append(f"{tag.name} (already on feature)")
                if parts:
                    yield context.warning(
                        self.warning_type,
                        f"Scenario has duplicate tags: {', '.join(parts)}",
                        feature=feature,
                        scenario=scenario,
                    )


class ExcessiveTagsDetector:
    warning_type = WarningType.EXCESSIVE_TAGS

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        limit = context.config.thresholds.max_tags
        for feature, scenario in context.scenarios():
            count = len(feature.effective_tags(scenario))
            if count > limit:
                yield context.warning(
                    self.warning_type,
                    f"Scenario has {count} tags, which is excessive (recommended max: {limit})",
                    feature=feature,
                    scenario=scenario,
                )


class OrphanedTagDetector:
    warning_type = WarningType.ORPHANED_TAG

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for tag in context.concordance.orphaned_tags():
            feature, scenario = _first_occurrence(context.features, tag)
            yield context.warning(
                self.warning_type,
                f"'{tag.name}' is only used once across all features",
                feature=feature,
                scenario=scenario,
            )


class TagTypoDetector:
    """Flags both tags of every near-identical pair, whatever their category."""

    warning_type = WarningType.TAG_TYPO

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for tag, others in context.concordance.similar_tags().items():
            for other in others:
                feature, scenario = _first_occurrence(context.features, tag)
                yield context.warning(
                    self.warning_type,
                    f"'{tag.name}' might be a typo of '{other.name}'",
                    feature=feature,
                    scenario=scenario,
                    alternatives=(other.name,),
                )


class InconsistentTaggingDetector:
    warning_type = WarningType.INCONSISTENT_TAGGING

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        styles: dict[str, None] = {}
        for tag in context.concordance.sorted_by_category():
            if tag.category(context.taxonomy) is not TagCategory.PRIORITY:
                continue
            style = priority_style(tag.name)
            if style is not None:
                styles.setdefault(style, None)
        if len(styles) > 1:
            yield context.warning(
                self.warning_type,
                "Multiple priority tag styles used across features "
                f"({', '.join(sorted(styles))})",
            )


class AmbiguousTagDetector:
    warning_type = WarningType.AMBIGUOUS_TAG

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        for tag in context.concordance.sorted_by_category():
            if len(tag.name) - len(SIGIL) > AMBIGUOUS_TAG_MAX_LENGTH:
                continue
            if tag.category(context.taxonomy) is not TagCategory.OTHER:
                continue
            feature, scenario = _first_occurrence(context.features, tag)
            yield context.warning(
                self.warning_type,
                f"'{tag.name}' is too short and ambiguous",
                feature=feature,
                scenario=scenario,
            )


class TooGenericTagDetector:
    warning_type = WarningType.TOO_GENERIC_TAG

    def detect(self, context: DetectionContext) -> Iterator[Finding]:
        total = len(context.features)
        if total <= GENERIC_TAG_MIN_FEATURES:
            return
        for tag in context.concordance.sorted_by_category():
            carrying = sum(
                1
                for feature in context.features
                if tag in feature.tags
                or any(tag in scenario.tags for scenario in feature.scenarios)
            )
            if carrying >= total * GENERIC_TAG_RATIO:
                yield context.warning(
                    self.warning_type,
                    f"'{tag.name}' is used on nearly all features, making it too generic "
                    f"to be useful (used in {carrying} out of {total} features)",
                )


DEFAULT_TAG_QUALITY_DETECTORS: tuple[Detector, ...] = (
    _MissingCategoryDetector(WarningType.MISSING_PRIORITY_TAG, TagCategory.PRIORITY, "priority"),
    _MissingCategoryDetector(WarningType.MISSING_TYPE_TAG, TagCategory.TYPE, "type"),
    LowValueTagDetector(),
    DuplicateTagDetector(),
    ExcessiveTagsDetector(),
    OrphanedTagDetector(),
    TagTypoDetector(),
    InconsistentTaggingDetector(),
    AmbiguousTagDetector(),
    TooGenericTagDetector(),
)

for _detector in DEFAULT_TAG_QUALITY_DETECTORS:
    register_detector(_detector, WarningFamily.TAG_QUALITY)


def analyze_tag_quality(
    features: Sequence[Feature],
    config: WarningConfiguration | None = None,
    *,
    concordance: TagConcordance | None = None,
    detectors: Iterable[Detector] | None = None,
) -> list[Finding]:
    context = DetectionContext.build(features, config, concordance)
    chosen = (
        registered_detectors(WarningFamily.TAG_QUALITY) if detectors is None else detectors
    )
    return run_detectors(context, chosen)
