"""Declarative field rules for customer payloads.

One table of :class:`FieldRule` entries drives validation and normalization
for both the API boundary and the portal forms. Evaluating a payload yields
the cleaned data plus a list of :class:`FieldViolation` pairs.

Partial updates rely on key presence: a key that is absent from the payload
is left alone, while a key that is present with an empty string or ``None``
clears an optional field. Required fields may be omitted on update but never
blanked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from email_validator import EmailNotValidError, validate_email

from .exceptions import ValidationError


class Operation(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class FieldRule:
    name: str
    label: str
    max_length: int
    required: bool = False
    email: bool = False


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str


@dataclass
class RuleResult:
    data: dict[str, str | None] = field(default_factory=dict)
    violations: list[FieldViolation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def errors_by_field(self) -> dict[str, str]:
        """First message per field, for form rendering."""
        errors: dict[str, str] = {}
        for violation in self.violations:
            errors.setdefault(violation.field, violation.message)
        return errors


CUSTOMER_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("first_name", "First name", 100, required=True),
    FieldRule("last_name", "Last name", 100, required=True),
    FieldRule("email", "Email", 255, required=True, email=True),
    FieldRule("phone_number", "Phone number", 20),
    FieldRule("address", "Address", 255),
    FieldRule("city", "City", 100),
    FieldRule("state", "State", 100),
    FieldRule("country", "Country", 100),
)

FIELD_NAMES = tuple(rule.name for rule in CUSTOMER_FIELDS)
OPTIONAL_FIELDS = frozenset(rule.name for rule in CUSTOMER_FIELDS if not rule.required)


def normalize_email(value: str) -> str:
    return value.strip().lower()


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _blank_message(rule: FieldRule, operation: Operation) -> str:
    if operation is Operation.CREATE:
        return f"{rule.label} is required"
    return f"{rule.label} cannot be empty"


def _check_value(rule: FieldRule, raw: Any, operation: Operation) -> tuple[str | None, str | None]:
    """Return ``(clean_value, error_message)`` for one present field."""
    if raw is None:
        if rule.required:
            return None, _blank_message(rule, operation)
        return None, None

    if not isinstance(raw, str):
        return None, f"{rule.label} must be a string"

    value = raw.strip()
    if not value:
        if rule.required:
            return None, _blank_message(rule, operation)
        return None, None

    if len(value) > rule.max_length:
        return None, f"{rule.label} must be less than {rule.max_length} characters"

    if rule.email:
        if not is_valid_email(value):
            return None, f"{rule.label} must be a valid email address"
        value = normalize_email(value)

    return value, None


def evaluate(payload: Mapping[str, Any], operation: Operation) -> RuleResult:
    """Evaluate every customer field rule against ``payload``.

    Keys that are not customer fields are ignored. On update, only keys
    present in ``payload`` appear in the result data.
    """
    result = RuleResult()
    for rule in CUSTOMER_FIELDS:
        if rule.name not in payload:
            if operation is Operation.CREATE and rule.required:
                result.violations.append(
                    FieldViolation(rule.name, _blank_message(rule, operation))
                )
            continue

        value, error = _check_value(rule, payload[rule.name], operation)
        if error:
            result.violations.append(FieldViolation(rule.name, error))
        else:
            result.data[rule.name] = value
    return result


def clean_payload(payload: Mapping[str, Any], operation: Operation) -> dict[str, str | None]:
    """Evaluate ``payload`` and raise :class:`ValidationError` on any violation."""
    result = evaluate(payload, operation)
    if not result.ok:
        raise ValidationError.from_violations(result.violations)
    return result.data
