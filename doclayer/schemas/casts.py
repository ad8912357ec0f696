"""Built-in cast functions.

A cast receives the full source document and the field's current value
(``None`` when the field is missing) and returns the coerced value, or
``None`` when it cannot produce one.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Mapping, Optional

import phonenumbers

DEFAULT_PHONE_REGION = "US"

CastFunction = Callable[[Mapping[str, Any], Any], Any]


class CastName(str, Enum):
    """Identifiers accepted by ``FieldSpec.cast``."""

    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    NAME = "name"
    PHONE = "phone"


def _name_part(source: Mapping[str, Any], index: int) -> Optional[str]:
    full_name = source.get("name")
    if not full_name or not isinstance(full_name, str):
        return None
    parts = full_name.split(" ")
    return parts[index] if len(parts) > index else None


def cast_first_name(source: Mapping[str, Any], value: Any) -> Any:
    derived = _name_part(source, 0)
    return derived if derived else value


def cast_last_name(source: Mapping[str, Any], value: Any) -> Any:
    derived = _name_part(source, 1)
    return derived if derived else value


def cast_name(source: Mapping[str, Any], value: Any) -> Any:
    first_name = source.get("firstName")
    if not first_name:
        return value
    last_name = source.get("lastName")
    return f"{first_name} {last_name}" if last_name else str(first_name)


def cast_phone(source: Mapping[str, Any], value: Any, region: str = DEFAULT_PHONE_REGION) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        number = phonenumbers.parse(str(value), region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_possible_number(number):
        return None
    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)


CASTS: dict[CastName, CastFunction] = {
    CastName.FIRST_NAME: cast_first_name,
    CastName.LAST_NAME: cast_last_name,
    CastName.NAME: cast_name,
    CastName.PHONE: cast_phone,
}


def resolve_cast(name: CastName | str) -> CastFunction:
    """Look up a cast function; raises ``ValueError`` for unknown names."""
    return CASTS[CastName(name)]
