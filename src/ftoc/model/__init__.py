from ftoc.model.concordance import TagConcordance
from ftoc.model.feature import (
    DEFAULT_FEATURE_NAME,
    Example,
    ExampleBuilder,
    Feature,
    FeatureBuilder,
    Scenario,
    ScenarioBuilder,
    ScenarioKind,
)
from ftoc.model.findings import Finding, Severity, WarningFamily, WarningType
from ftoc.model.tags import (
    DEFAULT_TAXONOMY,
    SIGIL,
    Tag,
    TagCategory,
    TagTaxonomy,
    levenshtein,
)

__all__ = [
    "DEFAULT_FEATURE_NAME",
    "DEFAULT_TAXONOMY",
    "Example",
    "ExampleBuilder",
    "Feature",
    "FeatureBuilder",
    "Finding",
    "SIGIL",
    "Scenario",
    "ScenarioBuilder",
    "ScenarioKind",
    "Severity",
    "Tag",
    "TagCategory",
    "TagConcordance",
    "TagTaxonomy",
    "WarningFamily",
    "WarningType",
    "levenshtein",
]
