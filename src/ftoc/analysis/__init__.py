from ftoc.analysis.anti_patterns import DEFAULT_ANTI_PATTERN_DETECTORS, analyze_anti_patterns
from ftoc.analysis.concordance import (
    ConcordanceReport,
    CoOccurrence,
    TagTrend,
    TrendDirection,
    analyze_concordance,
)
from ftoc.analysis.detector_contract import (
    DetectionContext,
    Detector,
    make_warning,
    register_detector,
    registered_detectors,
    unregister_detector,
)
from ftoc.analysis.tag_quality import DEFAULT_TAG_QUALITY_DETECTORS, analyze_tag_quality

__all__ = [
    "CoOccurrence",
    "ConcordanceReport",
    "DEFAULT_ANTI_PATTERN_DETECTORS",
    "DEFAULT_TAG_QUALITY_DETECTORS",
    "DetectionContext",
    "Detector",
    "TagTrend",
    "TrendDirection",
    "analyze_anti_patterns",
    "analyze_concordance",
    "analyze_tag_quality",
    "make_warning",
    "register_detector",
    "registered_detectors",
    "unregister_detector",
]
