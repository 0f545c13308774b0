"""Domain base types

Shared base model, identifier generation, clock and money rounding used by
every invoicing entity.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MONEY_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


class BaseModel(PydanticBaseModel):
    """
    Base for invoicing entities

    Entities are serialized with camelCase keys (the whole-state document
    format) and accept either camelCase or snake_case keys on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def generate_uuid(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Any) -> Decimal:
    """Round to 2 places, halves away from zero, on the exact decimal value."""
    return to_decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


class ValidationResult(BaseModel):
    """
    Outcome of an entity's validate()

    Validation never raises: callers decide whether to block a save.
    """

    is_valid: bool = Field(description="True when no rule was violated")
    errors: List[str] = Field(
        default_factory=list,
        description="Human-readable violations, in rule order",
    )

    @classmethod
    def from_errors(cls, errors: Iterable[str]) -> "ValidationResult":
        errors = list(errors)
        return cls(is_valid=not errors, errors=errors)
