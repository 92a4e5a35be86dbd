from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class UserProfile:
    """Company profile of one owner. Every field is independently optional."""

    owner_id: int
    company_description: str | None = None
    business_type: str | None = None
    company_activities: list[str] = field(default_factory=list)
    main_industries: list[str] = field(default_factory=list)
    specializations: list[str] = field(default_factory=list)
    preferences: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
