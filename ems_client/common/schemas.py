"""Shared pydantic base for backend payloads (camelCase on the wire)."""

from __future__ import annotations

import logging
from typing import Any, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from ems_client.common.constants import GENERIC_ERROR_MESSAGE
from ems_client.common.exceptions import ApiError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="WireModel")


class WireModel(BaseModel):
    """Accepts camelCase or snake_case input and ignores unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump with backend aliases, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def parse_one(model: type[ModelT], data: Any) -> ModelT:
    """Parse one backend record; a shape mismatch raises ApiError."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.error("Unexpected %s payload from backend: %s", model.__name__, exc)
        raise ApiError(GENERIC_ERROR_MESSAGE) from exc


def parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    """Parse a JSON array into models; anything else is an empty list."""
    if not isinstance(data, Sequence) or isinstance(data, (str, bytes)):
        return []
    return [parse_one(model, item) for item in data]


def to_payload(data: Any) -> Any:
    """Models go out with backend aliases; dicts and scalars pass through."""
    if isinstance(data, WireModel):
        return data.to_wire()
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True, mode="json")
    return data
