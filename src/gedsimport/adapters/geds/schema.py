"""Pydantic models describing a GEDS person export."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gedsimport.domain.slugs import english_acronym

ROOT_TAG = "gedsPerson"


def _strip(value: object) -> object:
    if isinstance(value, str):
        return value.strip()
    if value is None:
        return ""
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class GedsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class GedsPersonRecord(GedsBaseModel):
    """Fields of one ``<gedsPerson>`` element, keyed by their XML tag names."""

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    title: str | None = None
    email: str | None = None
    phone: str | None = Field(default=None, alias="workPhone")
    department_acronym: str | None = Field(default=None, alias="departmentAcronym")
    organization_acronym: str | None = Field(default=None, alias="organizationAcronym")
    department_names: list[str] = Field(default_factory=list, alias="orgStructure")

    _normalize_names = field_validator("first_name", "last_name", mode="before")(_strip)
    _normalize_optional = field_validator(
        "title",
        "email",
        "phone",
        "department_acronym",
        "organization_acronym",
        mode="before",
    )(_blank_to_none)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def department_slug(self) -> str | None:
        return english_acronym(self.department_acronym)

    @property
    def organization_slug(self) -> str | None:
        return english_acronym(self.organization_acronym)
