"""
Validation pipeline - Declarative field and cross-field rules.

A rule set maps field names to ordered rules. validate() evaluates every
rule of every field without short-circuiting and returns all violations
in declaration order. The pipeline is pure: it never touches storage.

Lengths are measured in Unicode code points (len(str)), so a username of
three CJK characters is three characters long.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import NamedTuple

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Violation(NamedTuple):
    """A single failed rule."""

    field: str
    rule: str
    message: str


ValidationResult = tuple[Violation, ...]


class Rule(ABC):
    """Base class for single-field rules."""

    name: str = "rule"
    message: str = "Invalid value"

    @abstractmethod
    def check(self, value: str) -> bool:
        """Return True when ``value`` satisfies the rule."""


@dataclass(frozen=True)
class Required(Rule):
    """Field must be present."""

    message: str = "This field is required"
    name: str = "required"

    def check(self, value: str) -> bool:
        return value is not None


@dataclass(frozen=True)
class Storable(Rule):
    """Value must be UTF-8 encodable and free of NUL characters."""

    message: str = "Contains characters that are not allowed"
    name: str = "characters"

    def check(self, value: str) -> bool:
        if "\x00" in value:
            return False
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return False
        return True


@dataclass(frozen=True)
class Length(Rule):
    """Length in code points must lie within [min_length, max_length]."""

    min_length: int | None = None
    max_length: int | None = None
    message: str = "Invalid length"
    name: str = "length"

    def check(self, value: str) -> bool:
        if self.min_length is not None and len(value) < self.min_length:
            return False
        if self.max_length is not None and len(value) > self.max_length:
            return False
        return True


@dataclass(frozen=True)
class EmailFormat(Rule):
    """Syntactic local@domain.tld check. Not an RFC 5322 validator."""

    message: str = "Invalid email address"
    name: str = "email"

    def check(self, value: str) -> bool:
        return _EMAIL_PATTERN.match(value) is not None


@dataclass(frozen=True)
class Pattern(Rule):
    """Value must contain a match for ``regex``."""

    regex: str = ""
    message: str = "Invalid format"
    name: str = "pattern"

    def check(self, value: str) -> bool:
        return re.search(self.regex, value) is not None


@dataclass(frozen=True)
class MustMatch(Rule):
    """
    Value must equal the value of field ``other``.

    Declare it on both fields of the pair; the pipeline reports the pair once.
    """

    other: str = ""
    message: str = "Passwords do not match"
    name: str = "must_match"

    def check(self, value: str) -> bool:
        raise TypeError("MustMatch compares two fields; evaluate it through validate()")


HAS_UPPERCASE = Pattern(
    regex=r"[A-Z]",
    name="uppercase",
    message="Password must contain at least one uppercase letter",
)
HAS_LOWERCASE = Pattern(
    regex=r"[a-z]",
    name="lowercase",
    message="Password must contain at least one lowercase letter",
)
HAS_DIGIT = Pattern(
    regex=r"[0-9]",
    name="digit",
    message="Password must contain at least one digit",
)

REGISTRATION_RULES: Mapping[str, Sequence[Rule]] = {
    "username": (
        Required(message="Username is required"),
        Storable(),
        Length(3, 30, message="Username must be between 3 and 30 characters"),
    ),
    "email": (
        Required(message="Email is required"),
        Storable(),
        EmailFormat(),
        Length(max_length=50, message="Email must be at most 50 characters"),
    ),
    "password": (
        Required(message="Password is required"),
        Storable(),
        Length(6, 128, message="Password must be between 6 and 128 characters"),
        HAS_UPPERCASE,
        HAS_LOWERCASE,
        HAS_DIGIT,
        MustMatch(other="confirm_password"),
    ),
    "confirm_password": (
        Required(message="Password confirmation is required"),
        Storable(),
        MustMatch(other="password"),
    ),
}

LOGIN_RULES: Mapping[str, Sequence[Rule]] = {
    "username": (
        Required(message="Username is required"),
        Storable(),
        Length(1, 30, message="Username must be between 1 and 30 characters"),
    ),
    "password": (
        Required(message="Password is required"),
        Storable(),
        Length(1, 128, message="Password must be between 1 and 128 characters"),
    ),
}


def validate(
    payload: Mapping[str, str | None], rule_set: Mapping[str, Sequence[Rule]]
) -> ValidationResult:
    """
    Evaluate ``rule_set`` against ``payload``.

    Fields missing from the payload count as absent (None). An absent field
    with a Required rule yields one violation; an absent optional field is
    skipped. MustMatch pairs yield at most one violation, attributed to the
    first field of the pair in rule-set order.

    Args:
        payload: Field name to raw value
        rule_set: Field name to ordered rules

    Returns:
        Tuple of violations; empty when the payload is accepted
    """
    violations: list[Violation] = []
    reported_pairs: set[frozenset[str]] = set()

    for field, rules in rule_set.items():
        value = payload.get(field)

        if value is None:
            for rule in rules:
                if isinstance(rule, Required):
                    violations.append(Violation(field, rule.name, rule.message))
            continue

        for rule in rules:
            if isinstance(rule, MustMatch):
                pair = frozenset((field, rule.other))
                if pair in reported_pairs:
                    continue
                if value != payload.get(rule.other):
                    reported_pairs.add(pair)
                    violations.append(Violation(field, rule.name, rule.message))
            elif not rule.check(value):
                violations.append(Violation(field, rule.name, rule.message))

    return tuple(violations)
