from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ftoc.exceptions import InvalidTag

SIGIL = "@"

_SEPARATORS = re.compile(r"[_\-.]")


class TagCategory(int, Enum):
    # Declaration order is the display order for category-sorted views.
    PRIORITY = 0
    TYPE = 1
    STATUS = 2
    OTHER = 3


def _casefold_names(names: Iterable[str]) -> frozenset[str]:
    folded: set[str] = set()
    for name in names:
        text = str(name).strip()
        if not text:
            continue
        if not text.startswith(SIGIL):
            text = SIGIL + text
        folded.add(text.casefold())
    return frozenset(folded)


@dataclass(frozen=True)
class TagTaxonomy:
    """Closed name lists deciding which category a tag belongs to.

    Names are stored case-folded with their sigil, so membership tests are
    case-insensitive. Configuration can replace any of the lists.
    """

    priority: frozenset[str] = field(default_factory=frozenset)
    type: frozenset[str] = field(default_factory=frozenset)
    status: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_names(
        cls,
        *,
        priority: Iterable[str] = (),
        type: Iterable[str] = (),
        status: Iterable[str] = (),
    ) -> "TagTaxonomy":
        return cls(
            priority=_casefold_names(priority),
            type=_casefold_names(type),
            status=_casefold_names(status),
        )

    def with_overrides(
        self,
        *,
        priority: Iterable[str] = (),
        type: Iterable[str] = (),
        status: Iterable[str] = (),
    ) -> "TagTaxonomy":
        """Replace each non-empty list; empty overrides keep the current list."""
        priority_names = _casefold_names(priority)
        type_names = _casefold_names(type)
        status_names = _casefold_names(status)
        return TagTaxonomy(
            priority=priority_names or self.priority,
            type=type_names or self.type,
            status=status_names or self.status,
        )

    def category_of(self, tag: "Tag") -> TagCategory:
        key = tag.name.casefold()
        if key in self.priority:
            return TagCategory.PRIORITY
        if key in self.type:
            return TagCategory.TYPE
        if key in self.status:
            return TagCategory.STATUS
        return TagCategory.OTHER


DEFAULT_TAXONOMY = TagTaxonomy.from_names(
    priority=(
        "@P0", "@P1", "@P2", "@P3", "@P4",
        "@Critical", "@High", "@Medium", "@Low",
        "@Priority0", "@Priority1", "@Priority2", "@Priority3",
    ),
    type=(
        "@UI", "@API", "@Backend", "@Frontend", "@Integration", "@Unit",
        "@Performance", "@Security", "@Regression", "@Smoke", "@E2E",
        "@Functional", "@Acceptance", "@System", "@Component",
    ),
    status=(
        "@WIP", "@Ready", "@Review", "@Flaky", "@Deprecated", "@Legacy",
        "@Todo", "@Debug", "@InProgress", "@Completed", "@Blocked",
    ),
)


def levenshtein(left: str, right: str) -> int:
    if left == right:
        return 0
    if not left:
        return len(right)
    if not right:
        return len(left)
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


@dataclass(frozen=True, eq=False, order=False)
class Tag:
    """A classification marker such as ``@Smoke``.

    The name always carries the sigil and keeps its original casing for
    display. Equality and hashing are case-insensitive over the name.
    """

    name: str

    @classmethod
    def of(cls, raw: "str | Tag") -> "Tag":
        if isinstance(raw, Tag):
            return raw
        if raw is None:
            raise InvalidTag(raw)
        text = str(raw).strip()
        if not text or text == SIGIL:
            raise InvalidTag(raw)
        if not text.startswith(SIGIL):
            text = SIGIL + text
        return cls(text)

    @property
    def key(self) -> str:
        """Comparison key: sigil stripped, case-folded, separators removed."""
        return _SEPARATORS.sub("", self.name[len(SIGIL):].casefold())

    def category(self, taxonomy: TagTaxonomy = DEFAULT_TAXONOMY) -> TagCategory:
        return taxonomy.category_of(self)

    def edit_distance(self, other: "Tag") -> int:
        return levenshtein(self.key, other.key)

    def is_similar_to(self, other: "Tag") -> bool:
        return self.edit_distance(other) <= 2

    def sort_key(self, taxonomy: TagTaxonomy = DEFAULT_TAXONOMY) -> tuple[int, str, str]:
        return (self.category(taxonomy).value, self.name.casefold(), self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.name.casefold() == other.name.casefold()

    def __hash__(self) -> int:
        return hash(self.name.casefold())

    def __str__(self) -> str:
        return self.name
