"""Line-oriented parser for Gherkin feature files.

The parser is a small state machine rather than a grammar: any line that
matches no rule becomes free text of whatever element is open, so there is no
syntax error path. One ``GherkinParser`` may be shared between threads; all
per-file state lives in a ``_ParseSession``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ftoc.exceptions import FeatureFileError, InvalidTag
from ftoc.model.feature import (
    ExampleBuilder,
    Feature,
    FeatureBuilder,
    ScenarioBuilder,
    ScenarioKind,
)
from ftoc.model.tags import SIGIL, Tag

logger = logging.getLogger(__name__)


class ParserState(str, Enum):
    IDLE = "idle"
    IN_FEATURE_HEADER = "in_feature_header"
    IN_SCENARIO_BODY = "in_scenario_body"
    IN_EXAMPLES_HEADER = "in_examples_header"
    IN_EXAMPLES_ROWS = "in_examples_rows"


# Outline must be tried before Scenario: both start with "Scenario".
_FEATURE = re.compile(r"^Feature:\s*(.*)$")
_BACKGROUND = re.compile(r"^Background:\s*(.*)$")
_OUTLINE = re.compile(r"^Scenario (?:Outline|Template):\s*(.*)$")
_SCENARIO = re.compile(r"^(?:Scenario|Example):\s*(.*)$")
_RULE = re.compile(r"^Rule:\s*(.*)$")
_EXAMPLES = re.compile(r"^(?:Examples|Scenarios):\s*(.*)$")

STEP_KEYWORDS: tuple[str, ...] = ("Given", "When", "Then", "And", "But")
_STEP = re.compile(r"^(?:Given|When|Then|And|But)(?:\s|$)")
_BULLET_STEP = re.compile(r"^\*(?:\s|$)")

_DOC_STRING_FENCES: tuple[str, ...] = ('"""', "```")
_CELL_SEPARATOR = "|"
_COMMENT = "#"

_SCENARIO_KEYWORDS: tuple[tuple[re.Pattern[str], ScenarioKind], ...] = (
    (_BACKGROUND, ScenarioKind.BACKGROUND),
    (_OUTLINE, ScenarioKind.OUTLINE),
    (_SCENARIO, ScenarioKind.SCENARIO),
    (_RULE, ScenarioKind.RULE),
)


def is_step_line(stripped: str) -> bool:
    return bool(_STEP.match(stripped) or _BULLET_STEP.match(stripped))


def is_table_row(stripped: str) -> bool:
    return (
        len(stripped) >= 2
        and stripped.startswith(_CELL_SEPARATOR)
        and stripped.endswith(_CELL_SEPARATOR)
    )


def tag_tokens(stripped: str) -> list[str] | None:
    """Tokens of a tag line, or None when the line is not one.

    Every token must carry the sigil; a trailing comment is allowed.
    """
    tokens: list[str] = []
    for token in stripped.split():
        if token.startswith(_COMMENT):
            break
        if not token.startswith(SIGIL) or token == SIGIL:
            return None
        tokens.append(token)
    return tokens or None


def split_cells(stripped: str) -> list[str]:
    """Split a table row on unescaped separators and trim every cell."""
    body = stripped[1:-1] if is_table_row(stripped) else stripped
    cells: list[str] = []
    current: list[str] = []
    chars = iter(body)
    for char in chars:
        if char == "\\":
            escaped = next(chars, "")
            if escaped == "n":
                current.append("\n")
            elif escaped in (_CELL_SEPARATOR, "\\"):
                current.append(escaped)
            else:
                current.append("\\" + escaped)
            continue
        if char == _CELL_SEPARATOR:
            cells.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    cells.append("".join(current).strip())
    return cells


@dataclass
class _ParseSession:
    path: str
    state: ParserState = ParserState.IDLE
    feature: FeatureBuilder = field(init=False)
    feature_opened: bool = False
    scenario: ScenarioBuilder | None = None
    example: ExampleBuilder | None = None
    pending_tags: list[Tag] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    described: FeatureBuilder | ScenarioBuilder | None = None
    collecting: bool = False
    fence: str | None = None

    def __post_init__(self) -> None:
        self.feature = FeatureBuilder(path=self.path)
        # Free text before any keyword belongs to the feature.
        self._open_description(self.feature)

    def feed(self, line_number: int, raw: str) -> None:
        stripped = raw.strip()

        if self.fence is not None:
            if stripped.startswith(self.fence):
                self.fence = None
            return

        if not stripped:
            if self.collecting and self.description and self.description[-1]:
                self.description.append("")
            return

        if stripped.startswith(_COMMENT):
            return

        if self.example is not None:
            if is_table_row(stripped):
                self._table_row(self.example, stripped)
                return
            self._close_table()

        for fence in _DOC_STRING_FENCES:
            if stripped.startswith(fence):
                self._flush_description()
                self.fence = fence
                return

        if self.scenario is not None and is_step_line(stripped):
            self._step(self.scenario, stripped)
            return

        tokens = tag_tokens(stripped)
        if tokens is not None:
            self._buffer_tags(tokens)
            return

        if self._structural(line_number, stripped):
            return

        if is_table_row(stripped):
            # Data table attached to a step; not part of the model.
            return

        self._free_text(stripped)

    def finish(self) -> Feature:
        self._flush_description()
        if self.pending_tags:
            logger.debug(
                "%s: %d trailing tag(s) with no element to attach to",
                self.path,
                len(self.pending_tags),
            )
        return self.feature.build()

    def _buffer_tags(self, tokens: list[str]) -> None:
        for token in tokens:
            try:
                self.pending_tags.append(Tag.of(token))
            except InvalidTag:
                continue

    def _take_tags(self) -> list[Tag]:
        tags, self.pending_tags = self.pending_tags, []
        return tags

    def _structural(self, line_number: int, stripped: str) -> bool:
        match = _FEATURE.match(stripped)
        if match is not None and not self.feature_opened:
            self._flush_description()
            self.feature_opened = True
            name = match.group(1).strip()
            if name:
                self.feature.name = name
            self.feature.add_tags(self._take_tags())
            self._open_description(self.feature)
            self.state = ParserState.IN_FEATURE_HEADER
            return True

        for pattern, kind in _SCENARIO_KEYWORDS:
            match = pattern.match(stripped)
            if match is None:
                continue
            self._flush_description()
            scenario = ScenarioBuilder(
                name=match.group(1).strip(),
                kind=kind,
                line=line_number,
            )
            tags = self._take_tags()
            if kind is not ScenarioKind.BACKGROUND:
                scenario.add_tags(tags)
            self.feature.add_scenario(scenario)
            self.scenario = scenario
            self.example = None
            self._open_description(scenario)
            self.state = ParserState.IN_SCENARIO_BODY
            return True

        match = _EXAMPLES.match(stripped)
        if match is not None and self.scenario is not None and self.scenario.is_outline:
            self._flush_description()
            self._take_tags()
            example = ExampleBuilder(name=match.group(1).strip())
            self.scenario.add_example(example)
            self.example = example
            self.described = None
            self.collecting = False
            self.state = ParserState.IN_EXAMPLES_HEADER
            return True

        return False

    def _step(self, scenario: ScenarioBuilder, stripped: str) -> None:
        self._flush_description()
        scenario.add_step(stripped)

    def _table_row(self, example: ExampleBuilder, stripped: str) -> None:
        cells = split_cells(stripped)
        if self.state is ParserState.IN_EXAMPLES_HEADER:
            example.set_headers(cell for cell in cells if cell)
            self.state = ParserState.IN_EXAMPLES_ROWS
            return
        width = len(example.headers)
        if len(cells) < width:
            cells = cells + [""] * (width - len(cells))
        example.add_row(cells[:width])

    def _close_table(self) -> None:
        self.example = None
        self.state = ParserState.IN_SCENARIO_BODY
        if self.scenario is not None:
            self._open_description(self.scenario)

    def _open_description(self, target: FeatureBuilder | ScenarioBuilder) -> None:
        self.described = target
        self.collecting = True
        self.description = []

    def _free_text(self, stripped: str) -> None:
        if not self.collecting:
            # Examples blocks take no description.
            return
        self.description.append(stripped)

    def _flush_description(self) -> None:
        lines = self.description
        self.description = []
        while lines and not lines[-1]:
            lines.pop()
        if not lines or self.described is None:
            return
        text = "\n".join(lines)
        existing = self.described.description
        self.described.description = f"{existing}\n\n{text}" if existing else text


class GherkinParser:
    dialect_id = "gherkin"

    def parse_text(self, text: str, path: str = "") -> Feature:
        session = _ParseSession(path=path)
        for line_number, raw in enumerate(text.splitlines(), start=1):
            session.feed(line_number, raw)
        feature = session.finish()
        logger.debug(
            "Parsed %s: %d scenario(s), %d feature tag(s)",
            path or "<text>",
            len(feature.scenarios),
            len(feature.tags),
        )
        return feature

    def parse_file(self, path: Path) -> Feature:
        return self.parse_text(read_feature_text(path), str(path))


def read_feature_text(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeError) as exc:
        raise FeatureFileError(path, exc) from exc
