"""Directory records produced by the import pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

PATH_SEPARATOR = "/"


def path_depth(path: str) -> int:
    """Number of ``/``-delimited segments, counting the implicit root."""

    return len(path.split(PATH_SEPARATOR))


@dataclass(frozen=True, slots=True)
class Department:
    path: str
    name: str
    description: str | None = None
    type: Literal["department"] = field(default="department", init=False)

    def to_dict(self) -> dict[str, str]:
        data = {"path": self.path, "type": self.type, "name": self.name}
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass(frozen=True, slots=True)
class Person:
    path: str
    name: str
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    type: Literal["person"] = field(default="person", init=False)

    def to_dict(self) -> dict[str, str]:
        data = {"path": self.path, "type": self.type, "name": self.name}
        for key, value in (("title", self.title), ("email", self.email), ("phone", self.phone)):
            if value is not None:
                data[key] = value
        return data


@dataclass(slots=True)
class DirectoryRecords:
    """Departments and people of one parsed document, or of a merged batch."""

    departments: list[Department] = field(default_factory=list)
    people: list[Person] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {
            "departments": [department.to_dict() for department in self.departments],
            "people": [person.to_dict() for person in self.people],
        }
