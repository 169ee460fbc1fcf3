from __future__ import annotations

from pathlib import Path

from ftoc.ingest.adapter_contract import FeatureParser
from ftoc.ingest.dialect import DIALECT_ID, DialectParser, is_dialect_file
from ftoc.ingest.gherkin_parser import GherkinParser

DEFAULT_DIALECT_ID = GherkinParser.dialect_id

_PARSERS_BY_DIALECT: dict[str, FeatureParser] = {}


def register_parser(parser: FeatureParser) -> None:
    _PARSERS_BY_DIALECT[parser.dialect_id.lower()] = parser


def parser_for_dialect(dialect_id: str) -> FeatureParser | None:
    return _PARSERS_BY_DIALECT.get(dialect_id.lower())


def parser_for(path: Path, *, detect_dialect: bool = True) -> FeatureParser:
    """Pick the parser for one file.

    Parsers keep no state between files, so the registered instances are
    safe to share across worker threads.
    """
    if detect_dialect and is_dialect_file(path):
        parser = parser_for_dialect(DIALECT_ID)
        if parser is not None:
            return parser
    # Import-time registration guarantees the default parser.
    return _PARSERS_BY_DIALECT[DEFAULT_DIALECT_ID]


register_parser(GherkinParser())
register_parser(DialectParser())
