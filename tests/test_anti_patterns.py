from __future__ import annotations

import textwrap

from ftoc.analysis.anti_patterns import analyze_anti_patterns
from ftoc.config import WarningConfiguration
from ftoc.ingest.gherkin_parser import GherkinParser
from ftoc.model.feature import Example, ScenarioKind
from ftoc.model.findings import Severity, WarningType

from tests.feature_helpers import COMPLETE_STEPS, make_feature, make_scenario, of_type, types_of


def _warnings_for(*scenarios, config=None):
    feature = make_feature("a.feature", scenarios=scenarios)
    return analyze_anti_patterns([feature], config)


def _steps(count: int) -> list[str]:
    middle = [f"And step {index}" for index in range(max(count - 3, 0))]
    return ["Given a start", *middle, "When it acts", "Then it ends"][:count]


def test_long_scenario_threshold() -> None:
    long_warnings = of_type(
        _warnings_for(make_scenario("long", steps=_steps(11))), WarningType.LONG_SCENARIO
    )
    assert [warning.message for warning in long_warnings] == [
        "Scenario has 11 steps (recommended maximum: 10)"
    ]
    assert of_type(_warnings_for(make_scenario("ok", steps=_steps(10))), WarningType.LONG_SCENARIO) == []


def test_long_scenario_uses_configured_threshold() -> None:
    config = WarningConfiguration.defaults().with_thresholds(max_steps=3)
    warnings = _warnings_for(make_scenario("four", steps=_steps(4)), config=config)
    assert [warning.message for warning in of_type(warnings, WarningType.LONG_SCENARIO)] == [
        "Scenario has 4 steps (recommended maximum: 3)"
    ]


def test_too_few_steps() -> None:
    warnings = _warnings_for(make_scenario("short", steps=["Then it works"]))
    assert [warning.message for warning in of_type(warnings, WarningType.TOO_FEW_STEPS)] == [
        "Scenario has only 1 step(s)"
    ]


def test_missing_step_categories() -> None:
    warnings = _warnings_for(
        make_scenario("no given", steps=["When I submit the form", "Then I see a receipt"])
    )
    types = types_of(warnings)
    assert WarningType.MISSING_GIVEN in types
    assert WarningType.MISSING_WHEN not in types
    assert WarningType.MISSING_THEN not in types
    missing = of_type(warnings, WarningType.MISSING_GIVEN)[0]
    assert missing.message == "Scenario is missing a Given step"
    assert missing.severity is Severity.ERROR


def test_continuation_steps_inherit_category() -> None:
    warnings = _warnings_for(
        make_scenario(
            "continued",
            steps=["Given a cart", "And a coupon", "When I pay", "Then I get a receipt", "But no refund"],
        )
    )
    types = types_of(warnings)
    assert not types & {
        WarningType.MISSING_GIVEN,
        WarningType.MISSING_WHEN,
        WarningType.MISSING_THEN,
        WarningType.INCORRECT_STEP_ORDER,
    }


def test_empty_scenario_misses_every_category() -> None:
    types = types_of(_warnings_for(make_scenario("empty", steps=[])))
    assert {
        WarningType.MISSING_GIVEN,
        WarningType.MISSING_WHEN,
        WarningType.MISSING_THEN,
        WarningType.TOO_FEW_STEPS,
    } <= types


def test_bullet_only_scenarios_skip_category_checks() -> None:
    types = types_of(
        _warnings_for(make_scenario("script", steps=["* def total = 1", "* match total == 1"]))
    )
    assert not types & {WarningType.MISSING_GIVEN, WarningType.MISSING_WHEN, WarningType.MISSING_THEN}


def test_incorrect_step_order() -> None:
    warnings = _warnings_for(
        make_scenario("when after then", steps=["Given a cart", "Then the total shows", "When I pay"]),
        make_scenario("given after when", steps=["Given a", "When b", "Given c", "Then d"]),
    )
    assert [warning.message for warning in of_type(warnings, WarningType.INCORRECT_STEP_ORDER)] == [
        'When step after Then step: "When I pay"',
        'Given step after When step: "Given c"',
    ]


def test_ui_focused_and_implementation_steps() -> None:
    warnings = _warnings_for(
        make_scenario(
            "leaky",
            steps=[
                "Given I am signed in",
                "When I click on the Submit button",
                "Then the database contains my order",
            ],
        )
    )
    assert [warning.message for warning in of_type(warnings, WarningType.UI_FOCUSED_STEP)] == [
        'Step contains UI-focused language: "When I click on the Submit button"'
    ]
    assert [warning.message for warning in of_type(warnings, WarningType.IMPLEMENTATION_DETAIL)] == [
        'Step contains technical implementation details: "Then the database contains my order"'
    ]


def test_outline_without_examples() -> None:
    warnings = _warnings_for(make_scenario("outline", kind=ScenarioKind.OUTLINE))
    assert [warning.message for warning in of_type(warnings, WarningType.MISSING_EXAMPLES)] == [
        "Scenario Outline has no Examples tables"
    ]


def test_too_few_examples_checks_each_block() -> None:
    text = textwrap.dedent(
        """
        Feature: Login
          Scenario Outline: attempts
            Given a user "<name>"
            When they sign in
            Then the result is "<result>"

            Examples: valid
              | name  | result  |
              | alice | success |
              | bob   | success |

            Examples: empty
              | name | result |
        """
    ).lstrip("\n")
    feature = GherkinParser().parse_text(text, "login.feature")
    warnings = analyze_anti_patterns([feature])
    too_few = of_type(warnings, WarningType.TOO_FEW_EXAMPLES)
    assert [warning.message for warning in too_few] == [
        "Examples table 'empty' has only 0 row(s) (recommended minimum: 2)"
    ]
    assert of_type(warnings, WarningType.MISSING_EXAMPLES) == []


def test_unnamed_examples_block() -> None:
    outline = make_scenario(
        "outline",
        kind=ScenarioKind.OUTLINE,
        examples=[Example(name="", headers=("a",), rows=(("1",),))],
    )
    too_few = of_type(_warnings_for(outline), WarningType.TOO_FEW_EXAMPLES)
    assert [warning.message for warning in too_few] == [
        "Examples table 'unnamed' has only 1 row(s) (recommended minimum: 2)"
    ]


def test_ambiguous_pronouns() -> None:
    warnings = _warnings_for(
        make_scenario(
            "pronouns",
            steps=[
                "Given I open the menu and close it",
                "When I click it",
                "Then that page is shown",
                "And that is shown",
            ],
        )
    )
    assert [warning.message for warning in of_type(warnings, WarningType.AMBIGUOUS_PRONOUN)] == [
        "Step contains ambiguous pronoun 'it': \"When I click it\"",
        "Step contains ambiguous pronoun 'that': \"And that is shown\"",
    ]


def test_inconsistent_tense() -> None:
    mixed = _warnings_for(
        make_scenario(
            "mixed",
            steps=["Given I am on the home page", "When I opened the menu", "Then I see the page"],
        )
    )
    assert [warning.message for warning in of_type(mixed, WarningType.INCONSISTENT_TENSE)] == [
        "Scenario uses a mix of present and past tense"
    ]
    consistent = _warnings_for(make_scenario("present", steps=COMPLETE_STEPS))
    assert of_type(consistent, WarningType.INCONSISTENT_TENSE) == []


def test_conjunction_in_step() -> None:
    warnings = _warnings_for(
        make_scenario(
            "joined",
            steps=[
                "Given the \"salt and pepper\" shaker",
                "And bread and butter",
                "When I enter my name and I submit the form",
                "Then I see a receipt",
            ],
        )
    )
    assert [warning.message for warning in of_type(warnings, WarningType.CONJUNCTION_IN_STEP)] == [
        "Step contains conjunction 'and' suggesting it should be split: "
        "\"When I enter my name and I submit the form\""
    ]


def test_long_scenario_name() -> None:
    name = "x" * 101
    warnings = _warnings_for(make_scenario(name))
    assert [warning.message for warning in of_type(warnings, WarningType.LONG_SCENARIO_NAME)] == [
        "Scenario name is 101 characters long (recommended maximum: 100)"
    ]
    assert of_type(_warnings_for(make_scenario("y" * 100)), WarningType.LONG_SCENARIO_NAME) == []


def test_long_step_text_previews_the_step() -> None:
    long_step = "Given " + "a" * 120
    warnings = _warnings_for(make_scenario("wordy", steps=[long_step, *COMPLETE_STEPS[1:]]))
    long_steps = of_type(warnings, WarningType.LONG_STEP_TEXT)
    assert len(long_steps) == 1
    message = long_steps[0].message
    assert message.startswith("Step text is 126 characters long (recommended maximum: 120): ")
    assert message.endswith('..."')
    assert long_step[:47] in message
    assert long_step not in message


def test_backgrounds_and_rules_are_not_checked() -> None:
    warnings = _warnings_for(
        make_scenario("setup", kind=ScenarioKind.BACKGROUND, steps=["Given only setup"]),
        make_scenario("group", kind=ScenarioKind.RULE, steps=[]),
    )
    assert warnings == []


def test_disabled_type_is_silent() -> None:
    config = WarningConfiguration.defaults().with_disabled(WarningType.TOO_FEW_STEPS)
    warnings = _warnings_for(make_scenario("short", steps=["Then it works"]), config=config)
    types = types_of(warnings)
    assert WarningType.TOO_FEW_STEPS not in types
    assert WarningType.MISSING_GIVEN in types


def test_clean_scenario_has_no_findings() -> None:
    assert _warnings_for(make_scenario("clean", steps=COMPLETE_STEPS)) == []


def test_empty_corpus_has_no_warnings() -> None:
    assert analyze_anti_patterns([]) == []


def test_zero_row_block_beside_a_filled_one() -> None:
    text = textwrap.dedent(
        """
        Feature: Sums
          Scenario Outline: add
            Given <a> and <b>
            When they are added
            Then the sum is shown

            Examples:
              | a | b |
              | 1 | 2 |

            Examples:
              | a | b |
        """
    ).lstrip("\n")
    feature = GherkinParser().parse_text(text, "sums.feature")
    outline = feature.scenarios[0]
    assert outline.examples[0].headers == ("a", "b")
    assert outline.examples[0].rows == (("1", "2"),)
    assert outline.examples[1].rows == ()
    too_few = of_type(analyze_anti_patterns([feature]), WarningType.TOO_FEW_EXAMPLES)
    assert too_few
    assert all(warning.scenario_name == "add" for warning in too_few)
    assert any("has only 0 row(s)" in warning.message for warning in too_few)
