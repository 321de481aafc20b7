# submission/validation.py
"""
Ordered validation rules for outbound submissions.

A rule list is checked top to bottom and the first violation wins, so the
user always sees exactly one message per attempt.
"""

import math
from typing import Any, Callable, NamedTuple

from common.errors import ValidationError


class Rule(NamedTuple):
    field: str
    check: Callable[[Any], bool]  # receives the whole config snapshot
    message: str


def has_text(value):
    return value is not None and str(value).strip() != ""


def to_number(value):
    """Parse a numeric string; returns None for blanks, garbage, NaN and infinities."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def to_int(value):
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def required(field, message):
    return Rule(field, lambda config: has_text(getattr(config, field)), message)


def all_required(fields, message):
    return [required(field, message) for field in fields]


def is_number(field, message):
    return Rule(field, lambda config: to_number(getattr(config, field)) is not None, message)


def positive_int(field, message):
    def check(config):
        number = to_int(getattr(config, field))
        return number is not None and number > 0
    return Rule(field, check, message)


def non_negative_int(field, message):
    def check(config):
        number = to_int(getattr(config, field))
        return number is not None and number >= 0
    return Rule(field, check, message)


def unit_interval(field, message):
    def check(config):
        number = to_number(getattr(config, field))
        return number is not None and 0 <= number <= 1
    return Rule(field, check, message)


def first_violation(rules, config):
    for rule in rules:
        if not rule.check(config):
            return ValidationError(rule.field, rule.message)
    return None


def validate(rules, config):
    """Raise ValidationError for the first rule ``config`` breaks."""
    violation = first_violation(rules, config)
    if violation is not None:
        raise violation
