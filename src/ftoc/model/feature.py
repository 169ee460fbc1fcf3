from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from types import MappingProxyType
from typing import Iterable, Mapping

from ftoc.model.tags import Tag

DEFAULT_FEATURE_NAME = "Unnamed Feature"

_EMPTY_METADATA: Mapping[str, object] = MappingProxyType({})


class ScenarioKind(str, Enum):
    SCENARIO = "Scenario"
    OUTLINE = "Scenario Outline"
    BACKGROUND = "Background"
    RULE = "Rule"


@dataclass(frozen=True)
class Example:
    name: str
    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class Scenario:
    name: str
    kind: ScenarioKind
    line: int
    description: str = ""
    tags: tuple[Tag, ...] = ()
    steps: tuple[str, ...] = ()
    examples: tuple[Example, ...] = ()

    @property
    def is_outline(self) -> bool:
        return self.kind is ScenarioKind.OUTLINE

    @property
    def is_background(self) -> bool:
        return self.kind is ScenarioKind.BACKGROUND

    @property
    def is_behavior(self) -> bool:
        """True for the kinds that carry Given/When/Then steps of their own."""
        return self.kind in (ScenarioKind.SCENARIO, ScenarioKind.OUTLINE)


@dataclass(frozen=True)
class Feature:
    path: str
    name: str = DEFAULT_FEATURE_NAME
    description: str = ""
    tags: tuple[Tag, ...] = ()
    scenarios: tuple[Scenario, ...] = ()
    metadata: Mapping[str, object] = field(default_factory=lambda: _EMPTY_METADATA, compare=False)

    @property
    def filename(self) -> str:
        return PurePath(self.path).name

    def effective_tags(self, scenario: Scenario) -> tuple[Tag, ...]:
        """Scenario tags unioned with this feature's tags, first mention wins."""
        seen: dict[Tag, None] = {}
        for tag in (*self.tags, *scenario.tags):
            seen.setdefault(tag, None)
        return tuple(seen)

    def with_metadata(self, entries: Mapping[str, object]) -> "Feature":
        merged = dict(self.metadata)
        merged.update(entries)
        return replace(self, metadata=MappingProxyType(merged))

    def has_capability(self, name: str) -> bool:
        return bool(self.metadata.get(name, False))


@dataclass
class ExampleBuilder:
    name: str
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def set_headers(self, headers: Iterable[str]) -> None:
        self.headers = list(headers)

    def add_row(self, cells: Iterable[str]) -> None:
        self.rows.append(list(cells))

    def build(self) -> Example:
        return Example(
            name=self.name,
            headers=tuple(self.headers),
            rows=tuple(tuple(row) for row in self.rows),
        )


@dataclass
class ScenarioBuilder:
    name: str
    kind: ScenarioKind
    line: int
    description: str = ""
    tags: list[Tag] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    examples: list[ExampleBuilder] = field(default_factory=list)

    @property
    def is_outline(self) -> bool:
        return self.kind is ScenarioKind.OUTLINE

    def add_tags(self, tags: Iterable[Tag]) -> None:
        self.tags.extend(tags)

    def add_step(self, step: str) -> None:
        self.steps.append(step)

    def add_example(self, example: ExampleBuilder) -> None:
        self.examples.append(example)

    def build(self) -> Scenario:
        return Scenario(
            name=self.name,
            kind=self.kind,
            line=self.line,
            description=self.description,
            tags=tuple(self.tags),
            steps=tuple(self.steps),
            examples=tuple(example.build() for example in self.examples),
        )


@dataclass
class FeatureBuilder:
    path: str
    name: str = DEFAULT_FEATURE_NAME
    description: str = ""
    tags: list[Tag] = field(default_factory=list)
    scenarios: list[ScenarioBuilder] = field(default_factory=list)

    def add_tags(self, tags: Iterable[Tag]) -> None:
        self.tags.extend(tags)

    def add_scenario(self, scenario: ScenarioBuilder) -> None:
        self.scenarios.append(scenario)

    def build(self) -> Feature:
        return Feature(
            path=self.path,
            name=self.name,
            description=self.description,
            tags=tuple(self.tags),
            scenarios=tuple(scenario.build() for scenario in self.scenarios),
        )
