from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from ftoc.model.feature import Feature


@dataclass(frozen=True)
class ParseFailure:
    path: Path
    stage: str
    error: str


@runtime_checkable
class FeatureParser(Protocol):
    dialect_id: str

    def parse_text(self, text: str, path: str) -> Feature: ...

    def parse_file(self, path: Path) -> Feature: ...
