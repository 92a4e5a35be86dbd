"""Builds CompanyAttributes from the parsed model reply."""

from typing import Any

from docpipe.extraction.exceptions import ExtractionParseError
from docpipe.extraction.models import CompanyAttributes


def build_attributes(data: dict[str, Any]) -> CompanyAttributes:
    """Validate field types and build CompanyAttributes.

    Missing keys and nulls are treated as absent. Blank strings and blank
    list entries are dropped.

    Raises:
        ExtractionParseError: when a field has the wrong type.
    """
    return CompanyAttributes(
        company_description=_optional_text(data, "companyDescription"),
        business_type=_optional_text(data, "businessType"),
        company_activities=_text_list(data, "companyActivities"),
        main_industries=_text_list(data, "mainIndustries"),
        specializations=_text_list(data, "specializations"),
    )


def _optional_text(data: dict[str, Any], key: str) -> str | None:
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ExtractionParseError(f"'{key}' must be a string or null")
    return raw.strip() or None


def _text_list(data: dict[str, Any], key: str) -> list[str]:
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ExtractionParseError(f"'{key}' must be an array or null")
    items: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ExtractionParseError(f"'{key}' entries must be strings")
        if item.strip():
            items.append(item.strip())
    return items
