"""Presentation helpers for the portal templates.

The macros under ``templates/components`` are presentation only: they take
plain values and render markup. The helpers here turn customer records into
those values and are registered on the Jinja environment as filters and
globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from customer_accounts.domain.customer_rules import CUSTOMER_FIELDS, FIELD_NAMES

TEMPLATE_DIR = Path(__file__).parent / "templates"

INPUT_TYPES = {"email": "email", "phone_number": "tel"}
WIDE_FIELDS = {"email", "address"}


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    max_length: int
    required: bool
    input_type: str
    wide: bool


FORM_FIELDS: tuple[FormField, ...] = tuple(
    FormField(
        name=rule.name,
        label=rule.label,
        max_length=rule.max_length,
        required=rule.required,
        input_type=INPUT_TYPES.get(rule.name, "text"),
        wide=rule.name in WIDE_FIELDS,
    )
    for rule in CUSTOMER_FIELDS
)


def full_name(customer: Any) -> str:
    return f"{customer.first_name} {customer.last_name}".strip()


def display_date(value: datetime | str | None) -> str:
    """Long date with time, e.g. ``January 15, 2024, 10:30 AM``."""
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return value.strftime("%B %d, %Y, %I:%M %p")


def location_parts(customer: Any) -> list[str]:
    return [part for part in (customer.city, customer.state, customer.country) if part]


def form_values(customer: Any | None = None, submitted: Mapping[str, Any] | None = None) -> dict[str, str]:
    """Values for the form inputs; submitted values win over the stored record."""
    values = {name: "" for name in FIELD_NAMES}
    if customer is not None:
        for name in FIELD_NAMES:
            values[name] = getattr(customer, name, None) or ""
    if submitted is not None:
        for name in FIELD_NAMES:
            if name in submitted:
                values[name] = str(submitted[name] or "")
    return values


def install(env: Environment) -> Environment:
    """Register filters and globals used by the templates."""
    env.filters["full_name"] = full_name
    env.filters["display_date"] = display_date
    env.filters["location_parts"] = location_parts
    env.globals["FORM_FIELDS"] = FORM_FIELDS
    return env


def build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    return install(env)


def render_component(env: Environment, template: str, macro: str, *args: Any, **kwargs: Any) -> Markup:
    """Call a macro from ``components/<template>`` and return its markup."""
    module = env.get_template(f"components/{template}").module
    return Markup(getattr(module, macro)(*args, **kwargs))
