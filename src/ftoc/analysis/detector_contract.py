from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Protocol, Sequence, runtime_checkable

from ftoc.config import WarningConfiguration
from ftoc.model.concordance import TagConcordance
from ftoc.model.feature import Feature, Scenario
from ftoc.model.findings import Finding, WarningFamily, WarningType
from ftoc.model.tags import TagTaxonomy


@dataclass(frozen=True)
class DetectionContext:
    """Read-only inputs shared by every detector in one analyzer run."""

    features: tuple[Feature, ...]
    config: WarningConfiguration
    concordance: TagConcordance

    @classmethod
    def build(
        cls,
        features: Sequence[Feature],
        config: WarningConfiguration | None = None,
        concordance: TagConcordance | None = None,
    ) -> "DetectionContext":
        resolved = config if config is not None else WarningConfiguration.defaults()
        if concordance is None:
            concordance = TagConcordance.from_features(features, taxonomy=resolved.taxonomy)
        return cls(features=tuple(features), config=resolved, concordance=concordance)

    @property
    def taxonomy(self) -> TagTaxonomy:
        return self.config.taxonomy

    def scenarios(self, *, behavior_only: bool = False) -> Iterator[tuple[Feature, Scenario]]:
        for feature in self.features:
            for scenario in feature.scenarios:
                if scenario.is_background:
                    continue
                if behavior_only and not scenario.is_behavior:
                    continue
                yield feature, scenario

    def warning(
        self,
        warning_type: WarningType,
        message: str,
        *,
        feature: Feature | None = None,
        scenario: Scenario | None = None,
        alternatives: Iterable[str] | None = None,
    ) -> Finding:
        return make_warning(
            self.config,
            warning_type,
            message,
            feature=feature,
            scenario=scenario,
            alternatives=alternatives,
        )


def make_warning(
    config: WarningConfiguration,
    warning_type: WarningType,
    message: str,
    *,
    feature: Feature | None = None,
    scenario: Scenario | None = None,
    alternatives: Iterable[str] | None = None,
) -> Finding:
    """Finding with the configured severity; alternatives default to the configured list."""
    resolved = (
        tuple(alternatives)
        if alternatives is not None
        else config.alternatives_for(warning_type)
    )
    return Finding.at(
        warning_type,
        config.severity_for(warning_type),
        message,
        feature=feature,
        scenario=scenario,
        alternatives=resolved,
    )


@runtime_checkable
class Detector(Protocol):
    warning_type: WarningType

    def detect(self, context: DetectionContext) -> Iterable[Finding]: ...


_REGISTRY: dict[WarningFamily, list[Detector]] = {family: [] for family in WarningFamily}


def register_detector(detector: Detector, family: WarningFamily | None = None) -> Detector:
    target = family if family is not None else detector.warning_type.family
    registered = _REGISTRY[target]
    if detector not in registered:
        registered.append(detector)
    return detector


def unregister_detector(detector: Detector) -> None:
    for registered in _REGISTRY.values():
        if detector in registered:
            registered.remove(detector)


def registered_detectors(family: WarningFamily) -> tuple[Detector, ...]:
    return tuple(_REGISTRY[family])


def run_detectors(
    context: DetectionContext, detectors: Iterable[Detector]
) -> list[Finding]:
    """Run every enabled detector; disabling one never suppresses another."""
    warnings: list[Finding] = []
    for detector in detectors:
        if not context.config.is_enabled(detector.warning_type):
            continue
        warnings.extend(detector.detect(context))
    return warnings
