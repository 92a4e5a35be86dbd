from dataclasses import replace

from docpipe.database.repositories.base import BaseProfileRepository
from docpipe.extraction.models import CompanyAttributes
from docpipe.logging.logger import Log
from docpipe.profile.models import UserProfile


def merge_profile(
    existing: UserProfile | None,
    owner_id: int,
    attributes: CompanyAttributes,
) -> UserProfile:
    """Fold extracted attributes into a profile.

    A field is overwritten only when the incoming value is present (non-blank
    string, non-empty list); otherwise the existing value stays. Without an
    existing profile, a new one is built with absent fields left empty.
    Applying the same attributes twice gives the same profile as once.
    """
    if existing is None:
        return UserProfile(
            owner_id=owner_id,
            company_description=attributes.company_description or None,
            business_type=attributes.business_type or None,
            company_activities=list(attributes.company_activities),
            main_industries=list(attributes.main_industries),
            specializations=list(attributes.specializations),
        )

    return replace(
        existing,
        company_description=attributes.company_description or existing.company_description,
        business_type=attributes.business_type or existing.business_type,
        company_activities=list(attributes.company_activities or existing.company_activities),
        main_industries=list(attributes.main_industries or existing.main_industries),
        specializations=list(attributes.specializations or existing.specializations),
    )


class ProfileMerger:
    """Loads, merges and stores a user's company profile."""

    def __init__(self, profile_repo: BaseProfileRepository) -> None:
        self._profile_repo = profile_repo

    async def merge(self, owner_id: int, attributes: CompanyAttributes) -> UserProfile:
        existing = await self._profile_repo.find_by_owner(owner_id)
        merged = merge_profile(existing, owner_id, attributes)

        if existing is None:
            Log.info(f"Creating company profile for user {owner_id}")
            return await self._profile_repo.create(merged)
        if merged == existing:
            Log.debug(f"Company profile for user {owner_id} unchanged")
            return existing
        Log.info(f"Updating company profile for user {owner_id}")
        return await self._profile_repo.update(merged)
