from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from ftoc.model.feature import Feature
from ftoc.model.tags import DEFAULT_TAXONOMY, Tag, TagCategory, TagTaxonomy


def _count_distinct(counts: dict[Tag, int], tags: Iterable[Tag]) -> None:
    # A tag repeated within one tag list counts once for that list.
    seen: set[Tag] = set()
    for tag in tags:
        if tag in seen:
            continue
        seen.add(tag)
        if tag in counts:
            counts[tag] += 1
        else:
            counts[tag] = 1


@dataclass(frozen=True)
class TagConcordance:
    """Immutable frequency index of the tags in a corpus.

    Feature-level and scenario-level mentions both count. The first spelling
    seen for a tag is the one kept for display.
    """

    counts: Mapping[Tag, int] = field(default_factory=lambda: MappingProxyType({}))
    taxonomy: TagTaxonomy = field(default=DEFAULT_TAXONOMY, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.counts, MappingProxyType):
            object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    @classmethod
    def empty(cls) -> "TagConcordance":
        return cls()

    @classmethod
    def from_features(
        cls,
        features: Sequence[Feature],
        *,
        taxonomy: TagTaxonomy = DEFAULT_TAXONOMY,
    ) -> "TagConcordance":
        counts: dict[Tag, int] = {}
        for feature in features:
            _count_distinct(counts, feature.tags)
            for scenario in feature.scenarios:
                _count_distinct(counts, scenario.tags)
        return cls(counts=counts, taxonomy=taxonomy)

    @classmethod
    def from_counts(
        cls,
        counts: Mapping[str, int],
        *,
        taxonomy: TagTaxonomy = DEFAULT_TAXONOMY,
    ) -> "TagConcordance":
        merged: dict[Tag, int] = {}
        for raw, count in counts.items():
            tag = Tag.of(raw)
            merged[tag] = merged.get(tag, 0) + int(count)
        return cls(counts=merged, taxonomy=taxonomy)

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, tag: object) -> bool:
        if isinstance(tag, str):
            tag = Tag.of(tag)
        return tag in self.counts

    def count(self, tag: Tag | str) -> int:
        return self.counts.get(Tag.of(tag), 0)

    @property
    def tags(self) -> tuple[Tag, ...]:
        return self.sorted_by_category()

    @property
    def unique_tag_count(self) -> int:
        return len(self.counts)

    @property
    def total_occurrences(self) -> int:
        return sum(self.counts.values())

    def is_empty(self) -> bool:
        return not self.counts

    def sorted_by_frequency(self) -> tuple[Tag, ...]:
        return tuple(
            sorted(
                self.counts,
                key=lambda tag: (-self.counts[tag], tag.name.casefold(), tag.name),
            )
        )

    def sorted_by_category(self) -> tuple[Tag, ...]:
        return tuple(sorted(self.counts, key=lambda tag: tag.sort_key(self.taxonomy)))

    def at_or_above(self, threshold: int) -> tuple[Tag, ...]:
        return tuple(tag for tag in self.sorted_by_category() if self.counts[tag] >= threshold)

    def at_or_below(self, threshold: int) -> tuple[Tag, ...]:
        return tuple(tag for tag in self.sorted_by_category() if self.counts[tag] <= threshold)

    def above(self, threshold: int) -> tuple[Tag, ...]:
        return tuple(tag for tag in self.sorted_by_category() if self.counts[tag] > threshold)

    def orphaned_tags(self) -> tuple[Tag, ...]:
        return tuple(tag for tag in self.sorted_by_category() if self.counts[tag] == 1)

    def filter_by_category(self, category: TagCategory) -> "TagConcordance":
        return TagConcordance(
            counts={
                tag: count
                for tag, count in self.counts.items()
                if tag.category(self.taxonomy) is category
            },
            taxonomy=self.taxonomy,
        )

    def similar_tags(self) -> dict[Tag, tuple[Tag, ...]]:
        """Candidate typos: every tag mapped to the others within edit distance 2."""
        ordered = self.sorted_by_category()
        similar: dict[Tag, list[Tag]] = {}
        for index, left in enumerate(ordered):
            for right in ordered[index + 1:]:
                if left.is_similar_to(right):
                    similar.setdefault(left, []).append(right)
                    similar.setdefault(right, []).append(left)
        return {
            tag: tuple(sorted(others, key=lambda other: other.sort_key(self.taxonomy)))
            for tag, others in similar.items()
        }

    def as_name_map(self) -> dict[str, int]:
        return {tag.name: self.counts[tag] for tag in self.sorted_by_category()}

    def summary(self) -> str:
        return (
            f"TagConcordance[uniqueTags={self.unique_tag_count}, "
            f"totalOccurrences={self.total_occurrences}]"
        )
