from __future__ import annotations
from datetime import date
from typing import Annotated, Any, Literal, Union
from pydantic import Field, ValidationError as PydanticValidationError, TypeAdapter
from contestjudge.enums import ContestType
from contestjudge.errors import ValidationError
from contestjudge.schemas.base import ApiModel


class LivestockMetadata(ApiModel):
    kind: Literal["LIVESTOCK"] = "LIVESTOCK"
    breed: str | None = Field(default=None, max_length=80)
    age: int | None = Field(default=None, ge=0, description="Age in months")
    sex: str | None = Field(default=None, max_length=16)
    weight: float | None = Field(default=None, gt=0, description="kg")
    height: float | None = Field(default=None, gt=0, description="cm")


class CoffeeMetadata(ApiModel):
    kind: Literal["COFFEE_PRODUCTS"] = "COFFEE_PRODUCTS"
    variety: str | None = Field(default=None, max_length=80)
    process: str | None = Field(default=None, max_length=80)
    altitude: int | None = Field(default=None, ge=0, description="masl")
    harvest_date: date | None = None


class GeneralProductMetadata(ApiModel):
    kind: Literal["GENERAL_PRODUCTS"] = "GENERAL_PRODUCTS"
    ingredients: list[str] = Field(default_factory=list)
    production_date: date | None = None
    expiry_date: date | None = None
    certifications: list[str] = Field(default_factory=list)


SubmissionMetadata = Annotated[
    Union[LivestockMetadata, CoffeeMetadata, GeneralProductMetadata],
    Field(discriminator="kind"),
]

_adapter: TypeAdapter = TypeAdapter(SubmissionMetadata)


def parse_metadata(contest_type: str, raw: dict[str, Any] | None) -> SubmissionMetadata:
    """
    Validate a client-supplied metadata map against the variant for the
    contest's type. A `kind` that disagrees with the contest type is rejected.
    """
    data = dict(raw or {})
    kind = data.setdefault("kind", ContestType(contest_type).value)
    if kind != contest_type:
        raise ValidationError(f"metadata kind {kind!r} does not match contest type {contest_type}")
    try:
        meta = _adapter.validate_python(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first["loc"][1:]) or "metadata"
        raise ValidationError(f"Invalid metadata field '{loc}': {first['msg']}")
    if isinstance(meta, GeneralProductMetadata) and meta.production_date and meta.expiry_date:
        if meta.expiry_date < meta.production_date:
            raise ValidationError("expiryDate must not precede productionDate")
    return meta


def load_metadata(stored: dict[str, Any] | None) -> SubmissionMetadata | None:
    """Rehydrate a stored metadata map; None for legacy or empty rows."""
    if not stored:
        return None
    return _adapter.validate_python(stored)
