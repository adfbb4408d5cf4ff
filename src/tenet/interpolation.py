"""Message interpolation for violation messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping


class MessageInterpolator(ABC):
    """Turns a message template and its parameters into a final message."""

    @abstractmethod
    def interpolate(self, template: str, parameters: Mapping[str, str], plural: int | None = None) -> str:
        ...


class PlaceholderInterpolator(MessageInterpolator):
    """Plain placeholder substitution.

    Parameter keys are the full placeholders (``{{ limit }}``). A template of
    the form ``singular|plural`` picks the singular form when ``plural`` is 1
    and the plural form otherwise; without a plural count the first form is
    used.
    """

    def interpolate(self, template: str, parameters: Mapping[str, str], plural: int | None = None) -> str:
        message = _select_form(template, plural)
        for placeholder, value in parameters.items():
            message = message.replace(placeholder, str(value))
        return message


def _select_form(template: str, plural: int | None) -> str:
    forms = template.split("|")
    if len(forms) == 1:
        return template
    if plural is None or plural == 1:
        return forms[0]
    return forms[1]
