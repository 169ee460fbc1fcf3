"""In-process orchestration: load a corpus, then run the analyzers over it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from ftoc.analysis.anti_patterns import analyze_anti_patterns
from ftoc.analysis.concordance import ConcordanceReport, analyze_concordance
from ftoc.analysis.tag_quality import analyze_tag_quality
from ftoc.config import WarningConfiguration, load_warning_configuration
from ftoc.ingest.adapter_contract import ParseFailure
from ftoc.ingest.corpus import DEFAULT_PARALLEL_THRESHOLD, load_features
from ftoc.model.concordance import TagConcordance
from ftoc.model.feature import Feature
from ftoc.model.findings import Finding, Severity
from ftoc.model.tags import Tag

logger = logging.getLogger(__name__)


class AnalysisStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    NOTHING_TO_ANALYZE = "nothing_to_analyze"


@dataclass(frozen=True)
class AnalysisOutcome:
    status: AnalysisStatus
    features: tuple[Feature, ...]
    concordance: TagConcordance
    report: ConcordanceReport
    tag_quality: tuple[Finding, ...] = ()
    anti_patterns: tuple[Finding, ...] = ()
    failures: tuple[ParseFailure, ...] = ()
    paths: tuple[Path, ...] = ()

    @property
    def warnings(self) -> tuple[Finding, ...]:
        """Every finding, ordered by source path and line."""
        return tuple(
            sorted((*self.tag_quality, *self.anti_patterns), key=lambda warning: warning.sort_key)
        )

    def warnings_at(self, severity: Severity) -> tuple[Finding, ...]:
        return tuple(warning for warning in self.warnings if warning.severity is severity)

    @property
    def has_errors(self) -> bool:
        return any(warning.severity is Severity.ERROR for warning in self.warnings)

    def summary(self) -> str:
        if self.status is AnalysisStatus.NOTHING_TO_ANALYZE:
            text = "Nothing to analyze: no feature files were parsed"
        else:
            text = (
                f"Analyzed {len(self.features)} feature file(s): "
                f"{self.concordance.unique_tag_count} unique tag(s), "
                f"{len(self.tag_quality)} tag quality warning(s), "
                f"{len(self.anti_patterns)} anti-pattern warning(s)"
            )
        if self.failures:
            text += f"; {len(self.failures)} file(s) could not be read"
        return text


def _carries(feature: Feature, wanted: frozenset[Tag]) -> bool:
    if wanted.intersection(feature.tags):
        return True
    return any(wanted.intersection(scenario.tags) for scenario in feature.scenarios)


def filter_features_by_tags(
    features: Sequence[Feature],
    include: Iterable[Tag | str] = (),
    exclude: Iterable[Tag | str] = (),
) -> list[Feature]:
    """Features carrying any include tag (all when none given) and no exclude tag."""
    included = frozenset(Tag.of(tag) for tag in include)
    excluded = frozenset(Tag.of(tag) for tag in exclude)
    kept: list[Feature] = []
    for feature in features:
        if included and not _carries(feature, included):
            continue
        if excluded and _carries(feature, excluded):
            continue
        kept.append(feature)
    return kept


def analyze_features(
    features: Sequence[Feature],
    config: WarningConfiguration | None = None,
    *,
    failures: Sequence[ParseFailure] = (),
    paths: Sequence[Path] = (),
) -> AnalysisOutcome:
    """Run all analyzers, in order, over an already-parsed corpus."""
    resolved = config if config is not None else WarningConfiguration.defaults()
    concordance = TagConcordance.from_features(features, taxonomy=resolved.taxonomy)
    report = analyze_concordance(features, taxonomy=resolved.taxonomy, concordance=concordance)
    tag_quality = analyze_tag_quality(features, resolved, concordance=concordance)
    anti_patterns = analyze_anti_patterns(features, resolved)
    if not features:
        status = AnalysisStatus.NOTHING_TO_ANALYZE
    elif failures:
        status = AnalysisStatus.PARTIAL
    else:
        status = AnalysisStatus.COMPLETE
    return AnalysisOutcome(
        status=status,
        features=tuple(features),
        concordance=concordance,
        report=report,
        tag_quality=tuple(tag_quality),
        anti_patterns=tuple(anti_patterns),
        failures=tuple(failures),
        paths=tuple(paths),
    )


def run_analysis(
    paths: Iterable[str | Path],
    *,
    config: WarningConfiguration | None = None,
    config_path: Path | None = None,
    root: Path | None = None,
    include_tags: Iterable[Tag | str] = (),
    exclude_tags: Iterable[Tag | str] = (),
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
    max_workers: int | None = None,
    detect_dialect: bool = True,
) -> AnalysisOutcome:
    if config is None:
        config = load_warning_configuration(root=root, config_path=config_path)
    load = load_features(
        paths,
        parallel_threshold=parallel_threshold,
        max_workers=max_workers,
        detect_dialect=detect_dialect,
    )
    features: Sequence[Feature] = load.features
    include = tuple(include_tags)
    exclude = tuple(exclude_tags)
    if include or exclude:
        features = filter_features_by_tags(features, include, exclude)
        logger.info(
            "Tag filter kept %d of %d feature file(s)", len(features), len(load.features)
        )
    outcome = analyze_features(features, config, failures=load.failures, paths=load.paths)
    logger.info("%s", outcome.summary())
    return outcome
