"""Exception taxonomy for ftoc."""

from __future__ import annotations

from pathlib import Path


class FtocError(Exception):
    """Base class for every error ftoc raises on purpose."""


class InvalidTag(FtocError, ValueError):
    """Tag text was empty or whitespace only."""

    def __init__(self, raw: object):
        super().__init__(f"Tag name cannot be empty: {raw!r}")
        self.raw = raw


class FeatureFileError(FtocError):
    """A feature file could not be read or decoded.

    The corpus loader catches this per file and records a failure witness, so
    one unreadable file never aborts a batch.
    """

    def __init__(self, path: Path | str, cause: BaseException):
        super().__init__(f"Cannot read feature file {path}: {cause}")
        self.path = Path(path)
        self.cause = cause


class ConfigurationError(FtocError):
    """The configuration document failed validation.

    Only raised between the validation layer and the loader; the loader turns
    it into a logged fallback to defaults.
    """
