from __future__ import annotations

from ftoc.analysis.tag_quality import ExcessiveTagsDetector, analyze_tag_quality
from ftoc.config import WarningConfiguration
from ftoc.model.feature import ScenarioKind
from ftoc.model.findings import Severity, WarningType

from tests.feature_helpers import make_feature, make_scenario, of_type, types_of


def test_missing_priority_and_type_tags() -> None:
    feature = make_feature(
        "a.feature",
        scenarios=[
            make_scenario("bare"),
            make_scenario("tagged", tags=["@P1", "@API"]),
        ],
    )
    warnings = analyze_tag_quality([feature])
    missing_priority = of_type(warnings, WarningType.MISSING_PRIORITY_TAG)
    missing_type = of_type(warnings, WarningType.MISSING_TYPE_TAG)
    assert [warning.scenario_name for warning in missing_priority] == ["bare"]
    assert [warning.scenario_name for warning in missing_type] == ["bare"]
    assert missing_priority[0].message == "Scenario is missing a priority tag"
    assert missing_priority[0].severity is Severity.ERROR
    assert "@P0" in missing_priority[0].alternatives
    assert missing_type[0].severity is Severity.WARNING


def test_feature_tags_satisfy_category_checks() -> None:
    feature = make_feature(
        "a.feature",
        tags=["@High", "@UI"],
        scenarios=[make_scenario("inherits")],
    )
    types = types_of(analyze_tag_quality([feature]))
    assert WarningType.MISSING_PRIORITY_TAG not in types
    assert WarningType.MISSING_TYPE_TAG not in types


def test_backgrounds_and_rules_need_no_category_tags() -> None:
    feature = make_feature(
        "a.feature",
        scenarios=[
            make_scenario("setup", kind=ScenarioKind.BACKGROUND),
            make_scenario("group", kind=ScenarioKind.RULE),
        ],
    )
    types = types_of(analyze_tag_quality([feature]))
    assert WarningType.MISSING_PRIORITY_TAG not in types
    assert WarningType.MISSING_TYPE_TAG not in types


def test_low_value_tags() -> None:
    feature = make_feature(
        "a.feature",
        tags=["@Test"],
        scenarios=[
            make_scenario("one", tags=["@skip"]),
            make_scenario("two"),
        ],
    )
    low_value = of_type(analyze_tag_quality([feature]), WarningType.LOW_VALUE_TAG)
    assert [(warning.scenario_name, warning.message) for warning in low_value] == [
        (None, "'@Test' is a known low-value tag that doesn't provide useful context"),
        ("one", "'@skip' is a known low-value tag that doesn't provide useful context"),
    ]
    assert low_value[0].severity is Severity.INFO


def test_duplicate_tags() -> None:
    feature = make_feature(
        "a.feature",
        tags=["@P1", "@UI", "@UI"],
        scenarios=[make_scenario("dup", tags=["@Smoke", "@Smoke", "@P1"])],
    )
    duplicates = of_type(analyze_tag_quality([feature]), WarningType.DUPLICATE_TAG)
    assert [warning.message for warning in duplicates] == [
        "Feature has duplicate tags: @UI",
        "Scenario has duplicate tags: @Smoke, @P1 (already on feature)",
    ]
    assert duplicates[0].scenario_name is None


def test_excessive_tags_counts_feature_tags() -> None:
    feature = make_feature(
        "a.feature",
        tags=["@P1", "@API", "@Alpha"],
        scenarios=[
            make_scenario("many", tags=["@Beta", "@Gamma", "@Delta", "@Epsilon"]),
            make_scenario("few", tags=["@Beta"]),
        ],
    )
    excessive = of_type(analyze_tag_quality([feature]), WarningType.EXCESSIVE_TAGS)
    assert [warning.scenario_name for warning in excessive] == ["many"]
    assert excessive[0].message == "Scenario has 7 tags, which is excessive (recommended max: 6)"


def test_orphaned_tags_point_at_first_use() -> None:
    features = [
        make_feature("a.feature", tags=["@Shared"], scenarios=[make_scenario("one", tags=["@Lonely"])]),
        make_feature("b.feature", tags=["@Shared"]),
    ]
    orphaned = of_type(analyze_tag_quality(features), WarningType.ORPHANED_TAG)
    assert [warning.message for warning in orphaned] == [
        "'@Lonely' is only used once across all features"
    ]
    assert orphaned[0].feature_path == "a.feature"
    assert orphaned[0].scenario_name == "one"


def test_tag_typo_flags_both_spellings() -> None:
    features = [
        make_feature("a.feature", tags=["@Regression"]),
        make_feature("b.feature", tags=["@Regressionn"]),
        make_feature("c.feature", tags=["@Smoke"]),
    ]
    typos = of_type(analyze_tag_quality(features), WarningType.TAG_TYPO)
    messages = sorted(warning.message for warning in typos)
    assert messages == [
        "'@Regression' might be a typo of '@Regressionn'",
        "'@Regressionn' might be a typo of '@Regression'",
    ]
    by_message = {warning.message: warning for warning in typos}
    assert by_message["'@Regressionn' might be a typo of '@Regression'"].alternatives == (
        "@Regression",
    )


def test_tag_typo_flags_near_identical_vocabulary_tags() -> None:
    features = [
        make_feature("a.feature", tags=["@P1", "@UI"]),
        make_feature("b.feature", tags=["@P2", "@API"]),
    ]
    typos = of_type(analyze_tag_quality(features), WarningType.TAG_TYPO)
    messages = {warning.message for warning in typos}
    assert {
        "'@P1' might be a typo of '@P2'",
        "'@P2' might be a typo of '@P1'",
        "'@UI' might be a typo of '@API'",
        "'@API' might be a typo of '@UI'",
    } <= messages


def test_inconsistent_priority_styles() -> None:
    features = [
        make_feature("a.feature", tags=["@P1"]),
        make_feature("b.feature", tags=["@High"]),
    ]
    inconsistent = of_type(analyze_tag_quality(features), WarningType.INCONSISTENT_TAGGING)
    assert [warning.message for warning in inconsistent] == [
        "Multiple priority tag styles used across features (p-style, severity-style)"
    ]


def test_single_priority_style_is_consistent() -> None:
    features = [
        make_feature("a.feature", tags=["@P1"]),
        make_feature("b.feature", tags=["@P2"]),
    ]
    assert of_type(analyze_tag_quality(features), WarningType.INCONSISTENT_TAGGING) == []


def test_ambiguous_short_tags() -> None:
    feature = make_feature("a.feature", tags=["@ab", "@UI", "@P1", "@Checkout"])
    ambiguous = of_type(analyze_tag_quality([feature]), WarningType.AMBIGUOUS_TAG)
    assert [warning.message for warning in ambiguous] == ["'@ab' is too short and ambiguous"]


def test_too_generic_tags_need_enough_features() -> None:
    many = [make_feature(f"f{index}.feature", tags=["@Common"]) for index in range(6)]
    generic = of_type(analyze_tag_quality(many), WarningType.TOO_GENERIC_TAG)
    assert [warning.message for warning in generic] == [
        "'@Common' is used on nearly all features, making it too generic to be useful "
        "(used in 6 out of 6 features)"
    ]
    few = many[:5]
    assert of_type(analyze_tag_quality(few), WarningType.TOO_GENERIC_TAG) == []


def test_disabling_one_type_keeps_the_others() -> None:
    feature = make_feature("a.feature", scenarios=[make_scenario("bare", tags=["@Lonely"])])
    config = WarningConfiguration.defaults().with_disabled(WarningType.ORPHANED_TAG)
    types = types_of(analyze_tag_quality([feature], config))
    assert WarningType.ORPHANED_TAG not in types
    assert WarningType.MISSING_PRIORITY_TAG in types
    assert WarningType.MISSING_TYPE_TAG in types


def test_explicit_detector_list() -> None:
    feature = make_feature(
        "a.feature",
        scenarios=[make_scenario("many", tags=[f"@T{index}" for index in range(8)])],
    )
    warnings = analyze_tag_quality([feature], detectors=[ExcessiveTagsDetector()])
    assert types_of(warnings) == {WarningType.EXCESSIVE_TAGS}


def test_empty_corpus_has_no_warnings() -> None:
    assert analyze_tag_quality([]) == []
