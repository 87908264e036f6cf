"""Department reference table schema."""

from pydantic import BaseModel, ConfigDict, Field


class DepartmentResponse(BaseModel):
    code: str
    name: str
    shortName: str = Field(..., validation_alias="short_name", serialization_alias="shortName")
    description: str
    color: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class DepartmentTableResponse(BaseModel):
    version: str
    departments: list[DepartmentResponse]
    years: dict[int, str]
