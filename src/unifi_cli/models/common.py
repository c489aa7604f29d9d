"""Response envelope models shared by all controller resources."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    """Base model accepting both field names and JSON aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, object]:
        """Dump the model as a JSON request body, omitting unset values."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Meta(ApiModel):
    """Status information included in most controller responses."""

    rc: str = ""
    # Duplicate group name when a name clash was rejected.
    name: str | None = None
    # Duplicate rule index when an index clash was rejected.
    rule_index: int | None = None
    msg: str | None = None


class FieldValidationError(ApiModel):
    """Field level validation failure reported by the controller."""

    field: str | None = None
    pattern: str | None = None


class DataValidationError(ApiModel):
    """Error entry that may appear in the data array of a failed request."""

    validation_error: FieldValidationError | None = Field(default=None, alias="validationError")
    rc: str | None = None
    msg: str | None = None


class ApiResponse(ApiModel, Generic[DataT]):
    """The ``{"meta": ..., "data": [...]}`` envelope of a REST response."""

    meta: Meta = Field(default_factory=Meta)
    data: list[DataT] = Field(default_factory=list)

    def first(self) -> DataT | None:
        return self.data[0] if self.data else None
