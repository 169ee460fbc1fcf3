"""Step keyword classification and the word-level heuristics behind the prose detectors.

None of this is grammatical parsing. Each helper is a small pattern or word
list check that trades precision for predictability.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import AbstractSet, Iterable, Sequence


class StepCategory(str, Enum):
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"


class Tense(str, Enum):
    PRESENT = "present"
    PAST = "past"


_PRIMARY_KEYWORDS: dict[str, StepCategory] = {
    "given": StepCategory.GIVEN,
    "when": StepCategory.WHEN,
    "then": StepCategory.THEN,
}
_CONTINUATION_KEYWORDS = frozenset({"and", "but", "*"})

_WORD = re.compile(r"[A-Za-z][A-Za-z'-]*")
_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
_PLACEHOLDER = re.compile(r"<[^<>]+>")
_PRONOUN_TOKENS = re.compile(r"\"[^\"]*\"|'[^']*'|<[^<>]+>|[A-Za-z][A-Za-z'-]*")
# Stand-in token for a quoted literal or a placeholder.
_LITERAL = "\0"

_DEMONSTRATIVES = frozenset({"this", "that", "these", "those"})

# Words after a demonstrative that make it a pronoun rather than a determiner.
_AUXILIARIES = frozenset({
    "is", "are", "was", "were", "be", "been", "has", "have", "had", "does",
    "do", "did", "will", "would", "should", "can", "could", "must", "may",
    "might", "shall", "and", "or", "but", "to", "in", "on", "at", "of",
    "for", "with", "from", "by", "as",
})
# Words that suggest a noun has already been introduced in the step.
_DETERMINERS = frozenset({"the", "a", "an", "my", "our", "their", "his", "her", "its", "each", "every"})

_TENSE_SUBJECTS = frozenset({"i", "user", "we"})
_PRESENT_VERBS = frozenset({
    "am", "is", "are", "do", "does", "have", "has", "click", "clicks", "select",
    "selects", "enter", "enters", "navigate", "navigates", "see", "sees",
    "view", "views", "open", "opens", "submit", "submits", "log", "logs",
    "go", "goes", "type", "types", "receive", "receives", "create", "creates",
})
_IRREGULAR_PAST = frozenset({
    "was", "were", "did", "had", "saw", "went", "made", "took", "got",
    "gave", "came", "wrote", "sent", "bought", "paid", "left", "found",
    "began", "chose", "knew", "ran", "set", "put", "read", "logged",
})
# -ed endings that are not past tense.
_ED_EXCEPTIONS = ("eed",)

_ACTION_VERBS = frozenset({
    "click", "clicks", "select", "selects", "enter", "enters", "navigate",
    "navigates", "submit", "submits", "open", "opens", "close", "closes",
    "type", "types", "press", "presses", "verify", "verifies", "see", "sees",
    "go", "goes", "log", "logs", "login", "logout", "create", "creates",
    "delete", "deletes", "save", "saves", "send", "sends", "check", "checks",
    "choose", "chooses", "add", "adds", "remove", "removes", "fill", "fills",
    "upload", "uploads", "download", "downloads", "wait", "waits", "should",
})
_SUBJECTS = frozenset({"i", "we", "you", "he", "she", "they", "user", "the"})


def step_keyword(step: str) -> str:
    """Leading keyword of a step line, or an empty string."""
    head, _, _ = step.strip().partition(" ")
    lowered = head.lower()
    if lowered in _PRIMARY_KEYWORDS or lowered in _CONTINUATION_KEYWORDS:
        return head
    return ""


def step_body(step: str) -> str:
    stripped = step.strip()
    keyword = step_keyword(stripped)
    if not keyword:
        return stripped
    return stripped[len(keyword):].strip()


def classify_steps(steps: Sequence[str]) -> list[StepCategory | None]:
    """Category of each step; continuations inherit the nearest primary keyword."""
    categories: list[StepCategory | None] = []
    current: StepCategory | None = None
    for step in steps:
        keyword = step_keyword(step).lower()
        if keyword in _PRIMARY_KEYWORDS:
            current = _PRIMARY_KEYWORDS[keyword]
        elif keyword not in _CONTINUATION_KEYWORDS:
            current = None
        categories.append(current)
    return categories


def is_bullet_only(steps: Sequence[str]) -> bool:
    return bool(steps) and all(step_keyword(step) == "*" for step in steps)


def words(text: str) -> list[str]:
    return [match.group(0).lower() for match in _WORD.finditer(text)]


def first_match(text: str, patterns: Iterable[re.Pattern[str]]) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match is not None:
            return match.group(0).strip()
    return None


def find_ambiguous_pronoun(step: str, pronouns: AbstractSet[str]) -> str | None:
    """First bare pronoun in a step with no antecedent earlier in the same step.

    Demonstratives followed by an ordinary word ("that page") are treated as
    determiners. Quoted literals and outline placeholders count as
    antecedents.
    """
    tokens: list[str] = []
    for match in _PRONOUN_TOKENS.finditer(step_body(step)):
        token = match.group(0)
        tokens.append(_LITERAL if token[0] in "\"'<" else token.lower())

    has_antecedent = False
    for index, token in enumerate(tokens):
        if token == _LITERAL:
            has_antecedent = True
            continue
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if token in _DETERMINERS and following not in (None, _LITERAL):
            has_antecedent = True
            continue
        if token not in pronouns:
            continue
        if token in _DEMONSTRATIVES and following not in (None, _LITERAL):
            if following not in _AUXILIARIES:
                has_antecedent = True
                continue
        if not has_antecedent:
            return token
    return None


def _is_past_form(word: str) -> bool:
    if word in _IRREGULAR_PAST:
        return True
    return word.endswith("ed") and not word.endswith(_ED_EXCEPTIONS) and len(word) > 3


def step_tense(step: str) -> Tense | None:
    """Tense of the first subject-verb pair ("I click", "user clicked")."""
    tokens = words(step_body(step))
    for index in range(len(tokens) - 1):
        if tokens[index] not in _TENSE_SUBJECTS:
            continue
        verb = tokens[index + 1]
        if verb in _PRESENT_VERBS:
            return Tense.PRESENT
        if _is_past_form(verb):
            return Tense.PAST
    return None


def find_joining_conjunction(step: str, conjunctions: AbstractSet[str]) -> str | None:
    """Conjunction that starts a second clause inside one step.

    The leading step keyword and quoted text are ignored. A conjunction
    counts only when a subject or an action verb follows it.
    """
    body = _QUOTED.sub(" ", step_body(step))
    body = _PLACEHOLDER.sub(" value ", body)
    tokens = words(body)
    for index, token in enumerate(tokens[:-1]):
        if index == 0 or token not in conjunctions:
            continue
        following = tokens[index + 1]
        if following in _SUBJECTS or following in _ACTION_VERBS:
            return token
    return None


def priority_style(tag_name: str) -> str | None:
    """Naming family of a priority tag: p-style, priority-style or severity-style."""
    lowered = tag_name.lower().lstrip("@")
    if re.fullmatch(r"priority\d+", lowered):
        return "priority-style"
    if re.fullmatch(r"p\d+", lowered):
        return "p-style"
    if lowered in {"critical", "high", "medium", "low"}:
        return "severity-style"
    return None
