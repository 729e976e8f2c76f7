"""Translate GEDS person exports into directory records."""

from __future__ import annotations

import html
from logging import getLogger
from typing import TYPE_CHECKING
from xml.etree.ElementTree import ParseError as XMLSyntaxError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring
from pydantic import ValidationError

from gedsimport.domain.errors import ParseError
from gedsimport.domain.merge import collect_documents, merge_documents
from gedsimport.domain.model import PATH_SEPARATOR, Department, DirectoryRecords, Person
from gedsimport.domain.slugs import slugify

from .schema import ROOT_TAG, GedsPersonRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from xml.etree.ElementTree import Element

    from gedsimport.domain.merge import DocumentOutcome

log = getLogger(__name__)

_TEXT_FIELDS = (
    "firstName",
    "lastName",
    "title",
    "email",
    "workPhone",
    "departmentAcronym",
    "organizationAcronym",
)


def parse_geds_xml(xml_text: str) -> DirectoryRecords:
    """Parse one GEDS XML export into its department chain and person.

    Raises :class:`ParseError` for malformed XML, a missing ``gedsPerson`` root,
    a nameless person, an empty department chain, or any other failure while
    building the records.
    """

    root = _parse_root(xml_text)
    try:
        record = GedsPersonRecord.model_validate(_extract_fields(root))
        return _build_records(record)
    except ParseError:
        raise
    except (ValidationError, ValueError, TypeError, AttributeError) as exc:
        log.debug("Unexpected failure while translating GEDS XML", exc_info=True)
        raise ParseError(f"Failed to parse GEDS XML: {exc}") from exc


def merge_geds_documents(documents: Sequence[str]) -> DirectoryRecords:
    """Parse and merge GEDS exports, failing on the first invalid document."""

    return merge_documents(documents, parse=parse_geds_xml)


def collect_geds_documents(documents: Sequence[str]) -> list[DocumentOutcome]:
    """Parse GEDS exports one by one, keeping failures alongside successes."""

    return collect_documents(documents, parse=parse_geds_xml)


def _parse_root(xml_text: str) -> Element:
    try:
        root = fromstring(xml_text)
    except (XMLSyntaxError, DefusedXmlException) as exc:
        raise ParseError(f"Invalid GEDS XML: {exc}") from exc
    if root.tag != ROOT_TAG:
        raise ParseError(f"Invalid GEDS XML: missing {ROOT_TAG} root element")
    return root


def _extract_fields(root: Element) -> dict[str, object]:
    fields: dict[str, object] = {tag: root.findtext(tag) for tag in _TEXT_FIELDS}
    fields["orgStructure"] = _department_names(root)
    return fields


def _department_names(root: Element) -> list[str]:
    structure = root.find("orgStructure")
    if structure is None:
        return []
    names: list[str] = []
    # The first node is the Government of Canada itself.
    for org in structure.findall("org")[1:]:
        name = html.unescape(org.findtext("name") or "").strip()
        if name:
            names.append(name)
    return names


def _build_records(record: GedsPersonRecord) -> DirectoryRecords:
    full_name = record.full_name
    if not full_name:
        raise ParseError("Invalid GEDS XML: person must have a name")
    names = record.department_names
    if not names:
        raise ParseError("No departments found in GEDS XML")

    departments: list[Department] = []
    current_path = ""
    for name, slug in _department_slugs(record):
        if not slug:
            log.debug("Skipping department %r with an empty slug", name)
            continue
        current_path = f"{current_path}{PATH_SEPARATOR}{slug}"
        departments.append(Department(path=current_path, name=name))

    person = Person(
        path=f"{current_path}{PATH_SEPARATOR}{slugify(full_name)}",
        name=full_name,
        title=record.title,
        email=record.email,
        phone=record.phone,
    )
    return DirectoryRecords(departments=departments, people=[person])


def _department_slugs(record: GedsPersonRecord) -> list[tuple[str, str]]:
    names = record.department_names
    preferred: dict[str, str] = {}
    if record.department_slug:
        preferred[names[0]] = record.department_slug
    # Assigned second: with a single department the organization acronym wins.
    if record.organization_slug:
        preferred[names[-1]] = record.organization_slug
    return [(name, preferred.get(name) or slugify(name)) for name in names]
