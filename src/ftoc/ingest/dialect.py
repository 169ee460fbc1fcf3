"""Karate-style dialect: detection and the metadata annotation pass.

The annotation pass re-reads the file after a successful base parse and only
adds capability flags to ``Feature.metadata``; the parsed scenarios are never
touched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ftoc.exceptions import FeatureFileError
from ftoc.ingest.gherkin_parser import GherkinParser, read_feature_text
from ftoc.model.feature import Feature
from ftoc.model.tags import Tag

logger = logging.getLogger(__name__)

DIALECT_ID = "karate"
DETECTION_LINE_LIMIT = 50

SCHEMA_MARKERS: tuple[str, ...] = (
    "#string", "#number", "#boolean", "#array", "#object", "#null",
    "#notnull", "#regex", "#uuid", "#present", "#notpresent",
)

_STAR_STEP = re.compile(r"^\s*\*\s+(.+)$")
_EMBEDDED_DATA = re.compile(r"\{\s*['\"\w]+\s*:")
_FUNCTION = re.compile(r"function\s*\(")
_MATCH = re.compile(r"match\s+\w+(\.\w+)*\s+")
_METHOD = re.compile(r"method\s+(GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)")
_STATUS = re.compile(r"status\s+\d+")
_SCHEMA_MARKER = re.compile("|".join(re.escape(marker) for marker in SCHEMA_MARKERS))
_DETECTION_KEYWORDS: tuple[str, ...] = (
    "method GET", "method POST", "status ", "match ", "url ",
)

_API_TAGS = frozenset(Tag.of(name) for name in ("@GET", "@POST", "@PUT", "@DELETE", "@API"))

META_DIALECT = "dialect"
META_REQUEST_STEPS = "hasRequestSteps"
META_SCHEMA_ASSERTIONS = "hasSchemaAssertions"
META_EMBEDDED_DATA = "hasEmbeddedData"
META_RESPONSE_MATCHING = "hasResponseMatching"
META_EMBEDDED_SCRIPT = "hasEmbeddedScript"
META_API_OPERATIONS = "hasApiOperations"


@dataclass(frozen=True)
class DialectSignals:
    bullet_steps: bool = False
    request_steps: bool = False
    schema_assertions: bool = False
    embedded_data: bool = False
    response_matching: bool = False
    embedded_script: bool = False

    @property
    def detected(self) -> bool:
        return self.bullet_steps or self.schema_assertions or self.embedded_data


def scan_lines(lines: Iterable[str]) -> DialectSignals:
    bullet_steps = request_steps = schema_assertions = False
    embedded_data = response_matching = embedded_script = False
    for line in lines:
        star = _STAR_STEP.match(line)
        if star is not None:
            bullet_steps = True
            content = star.group(1)
            if (
                _METHOD.search(content)
                or _STATUS.search(content)
                or "path" in content
                or "url" in content
            ):
                request_steps = True
            if _FUNCTION.search(content) or content.startswith("def ") or "assert " in content:
                embedded_script = True
            if _MATCH.search(content):
                response_matching = True
        if _SCHEMA_MARKER.search(line):
            schema_assertions = True
        if _EMBEDDED_DATA.search(line):
            embedded_data = True
    return DialectSignals(
        bullet_steps=bullet_steps,
        request_steps=request_steps,
        schema_assertions=schema_assertions,
        embedded_data=embedded_data,
        response_matching=response_matching,
        embedded_script=embedded_script,
    )


def annotate_feature(feature: Feature, signals: DialectSignals) -> Feature:
    if not signals.detected:
        return feature
    metadata: dict[str, object] = {META_DIALECT: True}
    if signals.request_steps:
        metadata[META_REQUEST_STEPS] = True
    if signals.schema_assertions:
        metadata[META_SCHEMA_ASSERTIONS] = True
    if signals.embedded_data:
        metadata[META_EMBEDDED_DATA] = True
    if signals.response_matching:
        metadata[META_RESPONSE_MATCHING] = True
    if signals.embedded_script:
        metadata[META_EMBEDDED_SCRIPT] = True
    if any(_API_TAGS.intersection(scenario.tags) for scenario in feature.scenarios):
        metadata[META_API_OPERATIONS] = True
    return feature.with_metadata(metadata)


def looks_like_dialect(lines: Iterable[str], path: str = "") -> bool:
    """Bounded look-ahead over the first non-blank, non-comment lines."""
    inspected = 0
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if inspected >= DETECTION_LINE_LIMIT:
            break
        inspected += 1
        if _STAR_STEP.match(line) or _SCHEMA_MARKER.search(line):
            return True
        if any(keyword in line for keyword in _DETECTION_KEYWORDS):
            return True
    return DIALECT_ID in path.lower()


def is_dialect_file(path: Path) -> bool:
    try:
        text = read_feature_text(path)
    except FeatureFileError as exc:
        logger.warning("Dialect detection skipped for %s: %s", path, exc.cause)
        return False
    return looks_like_dialect(text.splitlines(), str(path))


class DialectParser:
    dialect_id = DIALECT_ID

    def __init__(self, base: GherkinParser | None = None) -> None:
        self._base = base if base is not None else GherkinParser()

    def parse_text(self, text: str, path: str = "") -> Feature:
        feature = self._base.parse_text(text, path)
        return annotate_feature(feature, scan_lines(text.splitlines()))

    def parse_file(self, path: Path) -> Feature:
        feature = self._base.parse_file(path)
        try:
            text = read_feature_text(path)
        except FeatureFileError as exc:
            logger.warning(
                "Dialect annotation skipped for %s; keeping base parse: %s",
                path,
                exc.cause,
            )
            return feature
        return annotate_feature(feature, scan_lines(text.splitlines()))
