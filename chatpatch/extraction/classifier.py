"""
Actionability classifier — scores a fragment by weighted textual signals
and decides whether it is an edit to apply, an example, or explanation.

Every signal is evaluated on every call, so the same fragment and text
always produce the same score and the same reasoning list.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Callable

from .fragment_extractor import CodeFragment

logger = logging.getLogger(__name__)

ACTIONABLE_THRESHOLD = 20
CONTEXT_WINDOW = 200


class Decision(str, enum.Enum):
    ACTIONABLE = "actionable"
    EXEMPLAR = "exemplar"
    EXPLANATORY = "explanatory"


@dataclass(frozen=True)
class FragmentContext:
    """Lower-cased text windows around a fragment, plus its content."""
    before: str
    after: str
    content: str


@dataclass(frozen=True)
class Signal:
    name: str
    weight: int
    test: Callable[[CodeFragment, FragmentContext], bool]


@dataclass
class Classification:
    decision: Decision
    score: int
    confidence: int
    reasoning: list[str] = field(default_factory=list)

    @property
    def is_actionable(self) -> bool:
        return self.decision is Decision.ACTIONABLE


def _words(*words: str) -> re.Pattern:
    return re.compile(r"\b(?:" + "|".join(words) + r")")


_CREATE_WORDS = _words("create", "add", "implement")
_MODIFY_WORDS = _words("update", "modify", "change")
_FIX_WORDS = _words("fix", "complete", "replace")
_FUNCTION_WORD = re.compile(r"\bfunction\b")
_IN_WORDS = re.compile(r"\b(?:in|inside)\b")
_EXAMPLE_WORDS = re.compile(r"\bexample|here's how|here’s how|for instance")
_MODULE_TOKENS = re.compile(
    r"module\.exports|\bexport\b|^\s*import\b|^\s*from\s+\S+\s+import\b|\brequire\(",
    re.MULTILINE,
)
_FUNCTION_DEF = re.compile(r"\bfunction\b|^\s*(?:async\s+)?def\s+\w+|=>", re.MULTILINE)
_PLACEHOLDER = re.compile(
    r"console\.log\(\s*['\"`]hello,? world!?['\"`]\s*\)|print\(\s*['\"]hello,? world!?['\"]\s*\)"
    r"|placeholder|your code here|\.\.\. ?rest of",
    re.IGNORECASE,
)
_EXEMPLAR_WORDS = re.compile(r"\bexample|\bcurrent")


def _is_small_function(fragment: CodeFragment, ctx: FragmentContext) -> bool:
    content = ctx.content
    return (
        bool(_FUNCTION_DEF.search(content))
        and "module.exports" not in content
        and len(content.split("\n")) < 10
    )


SIGNALS: list[Signal] = [
    Signal("explicit_filename", 30, lambda f, c: bool(f.filename)),
    Signal("action_hint", 35,
           lambda f, c: f.action_hint in ("create", "update", "modify", "add")),
    Signal("context_create", 25, lambda f, c: bool(_CREATE_WORDS.search(c.before))),
    Signal("context_modify", 25, lambda f, c: bool(_MODIFY_WORDS.search(c.before))),
    Signal("context_fix", 30, lambda f, c: bool(_FIX_WORDS.search(c.before))),
    Signal("context_function_scope", 25,
           lambda f, c: bool(_FUNCTION_WORD.search(c.before))
           and bool(_IN_WORDS.search(c.before))),
    Signal("single_function", 25, _is_small_function),
    Signal("module_structure", 15, lambda f, c: bool(_MODULE_TOKENS.search(c.content))),
    Signal("marked_example", -20, lambda f, c: bool(_EXAMPLE_WORDS.search(c.before))),
    Signal("placeholder_content", -10, lambda f, c: bool(_PLACEHOLDER.search(c.content))),
]


class ActionabilityClassifier:
    """Score fragments as actionable / exemplar / explanatory."""

    def __init__(
        self,
        threshold: int = ACTIONABLE_THRESHOLD,
        window: int = CONTEXT_WINDOW,
        signals: list[Signal] | None = None,
    ) -> None:
        self._threshold = threshold
        self._window = window
        self._signals = list(SIGNALS if signals is None else signals)

    def context_for(self, fragment: CodeFragment, text: str) -> FragmentContext:
        start = fragment.source_offset
        end = fragment.end_offset or start
        return FragmentContext(
            before=text[max(0, start - self._window):start].lower(),
            after=text[end:end + self._window].lower(),
            content=fragment.content.lower(),
        )

    def classify(self, fragment: CodeFragment, text: str) -> Classification:
        """Classify *fragment* as it appears in the full response *text*."""
        ctx = self.context_for(fragment, text)

        score = 0
        reasoning: list[str] = []
        for signal in self._signals:
            if signal.test(fragment, ctx):
                score += signal.weight
                reasoning.append(signal.name)

        if score >= self._threshold:
            decision = Decision.ACTIONABLE
        elif _EXEMPLAR_WORDS.search(ctx.before):
            decision = Decision.EXEMPLAR
        else:
            decision = Decision.EXPLANATORY

        confidence = min(100, max(0, score))
        logger.debug(
            "[Classify] offset=%d score=%d decision=%s signals=%s",
            fragment.source_offset, score, decision.value, reasoning,
        )
        return Classification(
            decision=decision,
            score=score,
            confidence=confidence,
            reasoning=reasoning,
        )
