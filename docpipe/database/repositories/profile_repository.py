from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docpipe.database.connection import get_connection
from docpipe.database.exceptions import PersistenceError
from docpipe.database.repositories.base import BaseProfileRepository
from docpipe.profile.models import UserProfile

_COLUMNS = """
    user_id, company_description, business_type, company_activities,
    main_industries, specializations, preferences, created_at, updated_at
"""


class ProfileRepository(BaseProfileRepository):
    """Database operations for the user_profiles table."""

    async def find_by_owner(self, owner_id: int) -> UserProfile | None:
        row = await self._fetch_one(
            f"SELECT {_COLUMNS} FROM user_profiles WHERE user_id = %s",
            (owner_id,),
        )
        return _row_to_profile(row) if row is not None else None

    async def create(self, profile: UserProfile) -> UserProfile:
        row = await self._fetch_one(
            f"""
            INSERT INTO user_profiles
            (user_id, company_description, business_type, company_activities,
             main_industries, specializations, preferences, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, NOW(), NOW())
            RETURNING {_COLUMNS}
            """,
            (
                profile.owner_id,
                profile.company_description,
                profile.business_type,
                Jsonb(profile.company_activities),
                Jsonb(profile.main_industries),
                Jsonb(profile.specializations),
                Jsonb(profile.preferences),
            ),
            commit=True,
        )
        assert row is not None
        return _row_to_profile(row)

    async def update(self, profile: UserProfile) -> UserProfile:
        row = await self._fetch_one(
            f"""
            UPDATE user_profiles
            SET company_description = %s, business_type = %s,
                company_activities = %s, main_industries = %s,
                specializations = %s, updated_at = NOW()
            WHERE user_id = %s
            RETURNING {_COLUMNS}
            """,
            (
                profile.company_description,
                profile.business_type,
                Jsonb(profile.company_activities),
                Jsonb(profile.main_industries),
                Jsonb(profile.specializations),
                profile.owner_id,
            ),
            commit=True,
        )
        if row is None:
            raise PersistenceError(f"Profile for user {profile.owner_id} does not exist")
        return _row_to_profile(row)

    @staticmethod
    async def _fetch_one(
        query: str,
        params: tuple[Any, ...],
        *,
        commit: bool = False,
    ) -> dict[str, Any] | None:
        try:
            async with get_connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(query, params)
                    row = await cur.fetchone()
                if commit:
                    await conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Profile query failed: {exc}") from exc
        return row


def _row_to_profile(row: dict[str, Any]) -> UserProfile:
    return UserProfile(
        owner_id=row["user_id"],
        company_description=row["company_description"],
        business_type=row["business_type"],
        company_activities=list(row["company_activities"] or []),
        main_industries=list(row["main_industries"] or []),
        specializations=list(row["specializations"] or []),
        preferences=dict(row["preferences"] or {}),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
