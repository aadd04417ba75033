"""
Condition language for configurable emotion rules.

Rules express conditions as comparator strings keyed by signal name:

    {"consecutive_errors": ">=3", "response_time_ratio": ">1.5"}
    {"click_variance": "high"}

A comparator is an operator among >=, <=, >, <, = followed by a numeric
threshold, or a bare string compared for exact equality against a
string-valued signal. Strings are parsed once into a Condition. Anything
malformed becomes an invalid Condition that never matches, so a bad rule
row loses its turn instead of breaking inference.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from loguru import logger

_COMPARATOR_RE = re.compile(r"^\s*(>=|<=|>|<|=)\s*(.+?)\s*$")
_OPERATOR_CHARS_RE = re.compile(r"[<>=!]")


class Operator(str, Enum):
    """Supported comparison operators."""

    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    EQ = "="

    @property
    def fn(self) -> Callable[[float, float], bool]:
        return _OPERATOR_FUNCS[self]


_OPERATOR_FUNCS: dict[Operator, Callable[[float, float], bool]] = {
    Operator.GE: operator.ge,
    Operator.LE: operator.le,
    Operator.GT: operator.gt,
    Operator.LT: operator.lt,
    Operator.EQ: operator.eq,
}


@dataclass(frozen=True)
class Condition:
    """
    A parsed comparator bound to a signal name.

    Attributes:
        signal: Signal name the condition reads
        raw: Original comparator text (kept for persistence and logs)
        op: Operator, or None for a bare-string equality
        threshold: Numeric threshold for operator comparisons
        text: Expected value for bare-string equality
        valid: False when the comparator could not be parsed
    """

    signal: str
    raw: str
    op: Operator | None = None
    threshold: float | None = None
    text: str | None = None
    valid: bool = True

    @classmethod
    def parse(cls, signal: str, raw: str) -> Condition:
        """Parse a comparator string; never raises."""
        if not isinstance(raw, str):
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                return cls(signal=signal, raw=str(raw), op=Operator.EQ, threshold=float(raw))
            return cls(signal=signal, raw=repr(raw), valid=False)

        match = _COMPARATOR_RE.match(raw)
        if match is None:
            if not raw.strip() or _OPERATOR_CHARS_RE.search(raw):
                # Operator-looking text we don't understand, e.g. "!=3" or "=>2"
                return cls(signal=signal, raw=raw, valid=False)
            return cls(signal=signal, raw=raw, text=raw.strip())

        op_text, operand = match.groups()
        try:
            threshold = float(operand)
        except ValueError:
            if op_text == Operator.EQ.value and not _OPERATOR_CHARS_RE.search(operand):
                return cls(signal=signal, raw=raw, op=Operator.EQ, text=operand)
            return cls(signal=signal, raw=raw, valid=False)
        return cls(signal=signal, raw=raw, op=Operator(op_text), threshold=threshold)

    def evaluate(self, value: object) -> bool:
        """
        Evaluate against a signal value.

        Type mismatches (numeric comparator on a string signal, bare string
        on a numeric signal, missing value) evaluate to False.
        """
        if not self.valid or value is None:
            return False

        if isinstance(value, str):
            # Strings only support equality
            if self.text is not None and self.op in (None, Operator.EQ):
                return value == self.text
            return False

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.op is None or self.threshold is None:
            return False
        return self.op.fn(float(value), self.threshold)


def parse_conditions(conditions: dict[str, str]) -> tuple[Condition, ...]:
    """Parse a condition mapping, logging anything that will never match."""
    parsed = tuple(Condition.parse(signal, raw) for signal, raw in conditions.items())
    for condition in parsed:
        if not condition.valid:
            logger.debug(f"Unparsable condition {condition.signal}={condition.raw!r} never matches")
    return parsed
