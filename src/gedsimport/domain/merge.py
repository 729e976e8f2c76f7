"""Merge parsed GEDS documents into one import-ready record set."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from gedsimport.domain.errors import ParseError
from gedsimport.domain.model import Department, DirectoryRecords, Person, path_depth

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

DocumentParser = Callable[[str], DirectoryRecords]

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DocumentOutcome:
    """Per-document result of a best-effort parse."""

    index: int
    records: DirectoryRecords | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def merge_records(parsed: Iterable[DirectoryRecords]) -> DirectoryRecords:
    """Deduplicate departments by path and order the merged records.

    The first department seen for a path wins. People are kept as-is, duplicates
    included. Departments are ordered by depth, then path, so parents always come
    before their children; people are ordered by path.
    """

    departments: dict[str, Department] = {}
    people: list[Person] = []
    for records in parsed:
        for department in records.departments:
            departments.setdefault(department.path, department)
        people.extend(records.people)

    ordered_departments = sorted(
        departments.values(), key=lambda department: (path_depth(department.path), department.path)
    )
    people.sort(key=lambda person: person.path)
    return DirectoryRecords(departments=ordered_departments, people=people)


def merge_documents(documents: Sequence[str], *, parse: DocumentParser) -> DirectoryRecords:
    """Parse every document and merge them, aborting on the first invalid one.

    The raised :class:`ParseError` carries the index of the failing document.
    """

    parsed: list[DirectoryRecords] = []
    for index, document in enumerate(documents):
        try:
            parsed.append(parse(document))
        except ParseError as exc:
            log.warning("GEDS document %s failed to parse: %s", index, exc)
            raise exc.for_document(index) from exc
    merged = merge_records(parsed)
    log.debug(
        "Merged %s documents into %s departments and %s people",
        len(parsed),
        len(merged.departments),
        len(merged.people),
    )
    return merged


def collect_documents(documents: Sequence[str], *, parse: DocumentParser) -> list[DocumentOutcome]:
    """Parse every document, reporting success or failure per index."""

    outcomes: list[DocumentOutcome] = []
    for index, document in enumerate(documents):
        try:
            outcomes.append(DocumentOutcome(index=index, records=parse(document)))
        except ParseError as exc:
            outcomes.append(DocumentOutcome(index=index, error=exc.for_document(index)))
    return outcomes


def merge_outcomes(outcomes: Iterable[DocumentOutcome]) -> DirectoryRecords:
    """Merge the successfully parsed documents of a best-effort run."""

    return merge_records(outcome.records for outcome in outcomes if outcome.records is not None)
