"""ftoc package root: Gherkin feature parsing and tag analysis."""

from ftoc.exceptions import FeatureFileError, FtocError, InvalidTag
from ftoc.pipeline import (
    AnalysisOutcome,
    AnalysisStatus,
    analyze_features,
    filter_features_by_tags,
    run_analysis,
)

__all__ = [
    "__version__",
    "AnalysisOutcome",
    "AnalysisStatus",
    "FeatureFileError",
    "FtocError",
    "InvalidTag",
    "analyze_features",
    "filter_features_by_tags",
    "run_analysis",
]

__version__ = "0.1.0"
