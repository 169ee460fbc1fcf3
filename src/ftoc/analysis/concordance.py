"""Corpus-level tag statistics: frequency, co-occurrence, trend and significance.

Everything here is a pure function of the feature list. Trend classification
depends on the order of that list; callers that want a chronology must sort
the features themselves.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from types import MappingProxyType
from typing import Mapping, Sequence

from ftoc.model.concordance import TagConcordance
from ftoc.model.feature import Feature
from ftoc.model.tags import DEFAULT_TAXONOMY, Tag, TagTaxonomy

RISING_SLOPE = 0.1
DECLINING_SLOPE = -0.1


class TrendDirection(str, Enum):
    RISING = "Rising"
    DECLINING = "Declining"
    STABLE = "Stable"

    @classmethod
    def from_slope(cls, slope: float) -> "TrendDirection":
        if slope > RISING_SLOPE:
            return cls.RISING
        if slope < DECLINING_SLOPE:
            return cls.DECLINING
        return cls.STABLE


@dataclass(frozen=True)
class CoOccurrence:
    first: Tag
    second: Tag
    count: int
    coefficient: float

    @property
    def pair(self) -> frozenset[Tag]:
        return frozenset((self.first, self.second))

    def involves(self, tag: Tag) -> bool:
        return tag == self.first or tag == self.second

    def partner_of(self, tag: Tag) -> Tag | None:
        if tag == self.first:
            return self.second
        if tag == self.second:
            return self.first
        return None


@dataclass(frozen=True)
class TagTrend:
    tag: Tag
    slope: float
    direction: TrendDirection
    total_count: int
    scenario_count: int
    feature_count: int
    associated_tags: Mapping[Tag, int] = field(default_factory=lambda: MappingProxyType({}))

    def top_associations(self, limit: int = 5) -> tuple[tuple[Tag, int], ...]:
        ordered = sorted(
            self.associated_tags.items(),
            key=lambda item: (-item[1], item[0].name.casefold()),
        )
        return tuple(ordered[:limit])


@dataclass(frozen=True)
class ConcordanceReport:
    concordance: TagConcordance
    co_occurrences: tuple[CoOccurrence, ...]
    trends: Mapping[Tag, TagTrend]
    significance: Mapping[Tag, float]
    feature_count: int
    scenario_count: int
    _pairs: Mapping[frozenset[Tag], CoOccurrence] = field(
        default_factory=lambda: MappingProxyType({}), repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self._pairs and self.co_occurrences:
            object.__setattr__(
                self,
                "_pairs",
                MappingProxyType({entry.pair: entry for entry in self.co_occurrences}),
            )

    @property
    def frequencies(self) -> Mapping[Tag, int]:
        return self.concordance.counts

    def co_occurrence(self, left: Tag | str, right: Tag | str) -> CoOccurrence | None:
        return self._pairs.get(frozenset((Tag.of(left), Tag.of(right))))

    def coefficient(self, left: Tag | str, right: Tag | str) -> float:
        entry = self.co_occurrence(left, right)
        return entry.coefficient if entry is not None else 0.0

    def co_occurrences_for(self, tag: Tag | str) -> tuple[CoOccurrence, ...]:
        wanted = Tag.of(tag)
        return tuple(entry for entry in self.co_occurrences if entry.involves(wanted))

    def top_co_occurrences(self, limit: int = 10) -> tuple[CoOccurrence, ...]:
        return self.co_occurrences[:limit]

    def trend(self, tag: Tag | str) -> TagTrend | None:
        return self.trends.get(Tag.of(tag))

    def tags_trending(self, direction: TrendDirection) -> tuple[Tag, ...]:
        return tuple(
            tag
            for tag in self.concordance.sorted_by_category()
            if tag in self.trends and self.trends[tag].direction is direction
        )

    def most_significant(self, limit: int = 10) -> tuple[tuple[Tag, float], ...]:
        ordered = sorted(
            self.significance.items(),
            key=lambda item: (-item[1], item[0].name.casefold()),
        )
        return tuple(ordered[:limit])


def scenario_tag_sets(features: Sequence[Feature]) -> list[frozenset[Tag]]:
    """One tag set per non-background scenario, feature tags included."""
    sets: list[frozenset[Tag]] = []
    for feature in features:
        for scenario in feature.scenarios:
            if scenario.is_background:
                continue
            sets.append(frozenset(feature.effective_tags(scenario)))
    return sets


def compute_co_occurrences(features: Sequence[Feature]) -> tuple[CoOccurrence, ...]:
    """Jaccard coefficient for every tag pair sharing at least one scenario."""
    tag_sets = scenario_tag_sets(features)
    carriers: Counter[Tag] = Counter()
    together: Counter[tuple[Tag, Tag]] = Counter()
    for tag_set in tag_sets:
        carriers.update(tag_set)
        ordered = sorted(tag_set, key=lambda tag: (tag.name.casefold(), tag.name))
        for left, right in combinations(ordered, 2):
            together[(left, right)] += 1

    entries: list[CoOccurrence] = []
    for (left, right), both in together.items():
        either = carriers[left] + carriers[right] - both
        coefficient = both / either if either else 0.0
        entries.append(CoOccurrence(first=left, second=right, count=both, coefficient=coefficient))
    entries.sort(
        key=lambda entry: (
            -entry.coefficient,
            -entry.count,
            entry.first.name + entry.second.name,
        )
    )
    return tuple(entries)


def regression_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index; 0.0 below two points."""
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(index * value for index, value in enumerate(values))
    sum_x2 = sum(index * index for index in range(n))
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def _feature_tag_set(feature: Feature) -> frozenset[Tag]:
    tags: set[Tag] = set(feature.tags)
    for scenario in feature.scenarios:
        tags.update(scenario.tags)
    return frozenset(tags)


def compute_trends(
    features: Sequence[Feature], concordance: TagConcordance
) -> dict[Tag, TagTrend]:
    per_feature = [_feature_tag_set(feature) for feature in features]
    scenario_counts: Counter[Tag] = Counter()
    feature_counts: Counter[Tag] = Counter()
    associations: dict[Tag, Counter[Tag]] = {}

    def _associate(tag_list: Sequence[Tag]) -> None:
        distinct = list(dict.fromkeys(tag_list))
        for tag in distinct:
            bucket = associations.setdefault(tag, Counter())
            for other in distinct:
                if other != tag:
                    bucket[other] += 1

    for feature in features:
        feature_counts.update(set(feature.tags))
        _associate(feature.tags)
        for scenario in feature.scenarios:
            scenario_counts.update(set(scenario.tags))
            _associate(scenario.tags)

    trends: dict[Tag, TagTrend] = {}
    for tag in concordance.sorted_by_category():
        timeline = [1.0 if tag in tags else 0.0 for tags in per_feature]
        slope = regression_slope(timeline)
        trends[tag] = TagTrend(
            tag=tag,
            slope=slope,
            direction=TrendDirection.from_slope(slope),
            total_count=concordance.count(tag),
            scenario_count=scenario_counts[tag],
            feature_count=feature_counts[tag],
            associated_tags=MappingProxyType(dict(associations.get(tag, Counter()))),
        )
    return trends


def compute_significance(
    features: Sequence[Feature], concordance: TagConcordance
) -> dict[Tag, float]:
    """tf-idf style score: (count / N) * ln(N / (df + 1)), floored at zero."""
    total = len(features)
    if total == 0:
        return {}
    document_frequency: Counter[Tag] = Counter()
    for feature in features:
        document_frequency.update(_feature_tag_set(feature))
    scores: dict[Tag, float] = {}
    for tag in concordance.sorted_by_category():
        tf = concordance.count(tag) / total
        idf = math.log(total / (document_frequency[tag] + 1))
        scores[tag] = max(0.0, tf * idf)
    return scores


def analyze_concordance(
    features: Sequence[Feature],
    *,
    taxonomy: TagTaxonomy = DEFAULT_TAXONOMY,
    concordance: TagConcordance | None = None,
) -> ConcordanceReport:
    if concordance is None:
        concordance = TagConcordance.from_features(features, taxonomy=taxonomy)
    co_occurrences = compute_co_occurrences(features)
    return ConcordanceReport(
        concordance=concordance,
        co_occurrences=co_occurrences,
        trends=MappingProxyType(compute_trends(features, concordance)),
        significance=MappingProxyType(compute_significance(features, concordance)),
        feature_count=len(features),
        scenario_count=sum(
            1
            for feature in features
            for scenario in feature.scenarios
            if not scenario.is_background
        ),
    )
