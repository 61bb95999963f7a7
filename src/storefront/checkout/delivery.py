"""Delivery information captured at checkout and its validation rules.

Which fields are mandatory depends on the cart (see ``required_fields``); the
rules applied to a mandatory field are the same for every cart.
"""

from collections.abc import Mapping
from typing import Any

from protean.exceptions import ValidationError
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from storefront.cart.analysis import CONTACT_HANDLE, NICKNAME
from storefront.exceptions import pydantic_messages

MIN_LENGTH = 3

FIELD_MESSAGES = {
    NICKNAME: "Nickname must be at least 3 characters.",
    CONTACT_HANDLE: "Discord username must be at least 3 characters.",
}


class DeliveryInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    nickname: str | None = None
    discord: str | None = None

    @field_validator("nickname", "discord", mode="before")
    @classmethod
    def strip_whitespace(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    def sparse(self) -> dict[str, str]:
        """Only the fields that carry a value; empty ones are omitted, not nulled."""
        return {field: value for field, value in self.model_dump().items() if value}


def validate_delivery_info(payload: Mapping[str, Any] | None, required: frozenset[str]) -> DeliveryInfo:
    """Validate ``payload`` against the required field set.

    Every failing field is reported at once so a form can flag them together.
    """
    try:
        info = DeliveryInfo.model_validate(dict(payload or {}))
    except PydanticValidationError as exc:
        raise ValidationError(pydantic_messages(exc)) from exc

    errors = {}
    for field in sorted(required):
        value = getattr(info, field)
        if not value or len(value) < MIN_LENGTH:
            errors[field] = [FIELD_MESSAGES[field]]

    if errors:
        raise ValidationError(errors)
    return info
