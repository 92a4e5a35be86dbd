from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CompanyAttributes:
    """Company facts derived from a document. Absent values are None or empty."""

    company_description: str | None = None
    business_type: str | None = None
    company_activities: list[str] = field(default_factory=list)
    main_industries: list[str] = field(default_factory=list)
    specializations: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.company_description
            or self.business_type
            or self.company_activities
            or self.main_industries
            or self.specializations
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used in stored document data."""
        return {
            "companyDescription": self.company_description,
            "businessType": self.business_type,
            "companyActivities": list(self.company_activities),
            "mainIndustries": list(self.main_industries),
            "specializations": list(self.specializations),
        }


@dataclass(frozen=True)
class ExtractionSuccess:
    attributes: CompanyAttributes


@dataclass(frozen=True)
class ExtractionFailure:
    """Extraction produced nothing usable; the document keeps its OCR text."""

    reason: str

    @property
    def attributes(self) -> CompanyAttributes:
        return CompanyAttributes()


ExtractionOutcome = ExtractionSuccess | ExtractionFailure
