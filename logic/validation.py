"""Pydantic schemas and helpers for validating item submissions."""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from models.item import ItemType


class ItemSubmission(BaseModel):
    """Fields required to report a lost or found item."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    user_id: str = Field(min_length=1, validation_alias=AliasChoices("user_id", "userId", "created_by"))
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image_ref: str = Field(min_length=1, validation_alias=AliasChoices("image_ref", "image_url", "imageUrl"))
    type: Literal["lost", "found"]

    @property
    def item_type(self) -> ItemType:
        return ItemType(self.type)


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["error"] = "error"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent error payload."""

    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return ValidationResult(message=message, details=details).model_dump()


def submission_failure(exc: ValidationError) -> Dict[str, Any]:
    """Error payload for a rejected submission, naming the offending fields."""

    fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
    return validation_failure(f"Invalid item submission: {', '.join(fields) or 'payload'}", exc)


__all__ = ["ItemSubmission", "ValidationResult", "validation_failure", "submission_failure"]
