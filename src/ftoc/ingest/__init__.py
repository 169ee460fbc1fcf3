from ftoc.ingest.adapter_contract import FeatureParser, ParseFailure
from .corpus import (
    CorpusLoad,
    iter_feature_paths,
    load_features,
    parse_feature_file,
)
from .dialect import DialectParser, is_dialect_file
from .gherkin_parser import GherkinParser
from .registry import parser_for, register_parser

__all__ = [
    "CorpusLoad",
    "DialectParser",
    "FeatureParser",
    "GherkinParser",
    "ParseFailure",
    "is_dialect_file",
    "iter_feature_paths",
    "load_features",
    "parse_feature_file",
    "parser_for",
    "register_parser",
]
