from __future__ import annotations

from typing import Protocol

CUSTOMER_NAME_PLACEHOLDER = "[CustomerName]"
FALLBACK_NAME = "valued customer"


class _HasMessage(Protocol):
    message: str


class _HasName(Protocol):
    name: str | None


def display_name(customer: _HasName) -> str:
    name = (getattr(customer, "name", None) or "").strip()
    return name or FALLBACK_NAME


def render(template: _HasMessage | str, customer: _HasName) -> str:
    """Substitute the customer's name into a template body.

    Only the ``[CustomerName]`` token is touched; everything else in the body
    is returned verbatim.
    """
    body = template if isinstance(template, str) else template.message
    return body.replace(CUSTOMER_NAME_PLACEHOLDER, display_name(customer))
