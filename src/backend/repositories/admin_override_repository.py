"""
Repository for operator bulk data.

Upserts are last-write-wins on the exact (poll, question, constituency, ward)
tuple, matched NULL-safely. Additive merging across tuples happens only when
results are read.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.admin_override import AdminBulkResponse, AdminDemographics
from repositories.filters import LocationFilter


class AdminOverrideRepository:
    """Repository for bulk responses and bulk demographics."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================================================
    # Bulk responses
    # ========================================================================

    async def get_bulk_exact(
        self,
        poll_id: int,
        question_id: int,
        constituency: Optional[str],
        ward: Optional[str],
    ) -> Optional[AdminBulkResponse]:
        result = await self.db.execute(
            select(AdminBulkResponse).where(
                AdminBulkResponse.poll_id == poll_id,
                AdminBulkResponse.question_id == question_id,
                AdminBulkResponse.constituency.is_not_distinct_from(constituency),
                AdminBulkResponse.ward.is_not_distinct_from(ward),
            )
        )
        return result.scalar_one_or_none()

    async def upsert_bulk(
        self,
        poll_id: int,
        question_id: int,
        constituency: Optional[str],
        ward: Optional[str],
        option_counts: dict,
        competitor_counts: dict,
        open_ended_responses: list[str],
        rating_values: list[int],
        ranking_counts: dict,
    ) -> tuple[AdminBulkResponse, bool]:
        """Overwrite the row for the exact tuple or insert it; returns (row, created)."""
        values = {
            "option_counts": option_counts,
            "competitor_counts": competitor_counts,
            "open_ended_responses": open_ended_responses,
            "rating_values": rating_values,
            "ranking_counts": ranking_counts,
        }
        row = await self.get_bulk_exact(poll_id, question_id, constituency, ward)
        created = row is None
        if row is None:
            row = AdminBulkResponse(
                poll_id=poll_id,
                question_id=question_id,
                constituency=constituency,
                ward=ward,
                **values,
            )
            self.db.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.db.flush()
        return row, created

    async def list_bulk_exact(
        self,
        poll_id: int,
        constituency: Optional[str],
        ward: Optional[str],
    ) -> list[AdminBulkResponse]:
        """Rows stored for exactly this location (NULL matches NULL)."""
        result = await self.db.execute(
            select(AdminBulkResponse)
            .where(
                AdminBulkResponse.poll_id == poll_id,
                AdminBulkResponse.constituency.is_not_distinct_from(constituency),
                AdminBulkResponse.ward.is_not_distinct_from(ward),
            )
            .order_by(AdminBulkResponse.question_id)
        )
        return list(result.scalars().all())

    async def list_bulk_for_results(
        self,
        poll_id: int,
        location: LocationFilter,
    ) -> list[AdminBulkResponse]:
        """Rows merged into results for the given filter."""
        result = await self.db.execute(
            select(AdminBulkResponse)
            .where(
                AdminBulkResponse.poll_id == poll_id,
                *location.override_conditions(AdminBulkResponse),
            )
            .order_by(AdminBulkResponse.id)
        )
        return list(result.scalars().all())

    # ========================================================================
    # Bulk demographics
    # ========================================================================

    async def get_demographics_exact(
        self,
        poll_id: int,
        constituency: Optional[str],
        ward: Optional[str],
    ) -> Optional[AdminDemographics]:
        result = await self.db.execute(
            select(AdminDemographics).where(
                AdminDemographics.poll_id == poll_id,
                AdminDemographics.constituency.is_not_distinct_from(constituency),
                AdminDemographics.ward.is_not_distinct_from(ward),
            )
        )
        return result.scalar_one_or_none()

    async def upsert_demographics(
        self,
        poll_id: int,
        constituency: Optional[str],
        ward: Optional[str],
        gender_counts: dict,
        age_range_counts: dict,
    ) -> tuple[AdminDemographics, bool]:
        row = await self.get_demographics_exact(poll_id, constituency, ward)
        created = row is None
        if row is None:
            row = AdminDemographics(
                poll_id=poll_id,
                constituency=constituency,
                ward=ward,
                gender_counts=gender_counts,
                age_range_counts=age_range_counts,
            )
            self.db.add(row)
        else:
            row.gender_counts = gender_counts
            row.age_range_counts = age_range_counts
        await self.db.flush()
        return row, created

    async def list_demographics_for_results(
        self,
        poll_id: int,
        location: LocationFilter,
    ) -> list[AdminDemographics]:
        result = await self.db.execute(
            select(AdminDemographics)
            .where(
                AdminDemographics.poll_id == poll_id,
                *location.override_conditions(AdminDemographics),
            )
            .order_by(AdminDemographics.id)
        )
        return list(result.scalars().all())
