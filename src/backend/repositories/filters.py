"""
Location filters shared by the results queries.

Filters are applied as a fixed set of parameterized conditions chosen by
which fields are present; no SQL text is assembled from input.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import and_, or_


@dataclass(frozen=True)
class LocationFilter:
    """Optional county / constituency / ward restriction for results."""

    county: Optional[str] = None
    constituency: Optional[str] = None
    ward: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.county or self.constituency or self.ward)

    def response_conditions(self, model: Any) -> list:
        """Exact-match conditions on a row's own location columns."""
        conditions = []
        if self.county:
            conditions.append(model.county == self.county)
        if self.constituency:
            conditions.append(model.constituency == self.constituency)
        if self.ward:
            conditions.append(model.ward == self.ward)
        return conditions

    def override_conditions(self, model: Any) -> list:
        """
        Which bulk rows a results request merges.

        constituency + ward: poll-wide, constituency-wide and the exact ward row.
        constituency only:   poll-wide and constituency-wide rows; ward rows of
                             that constituency are left out.
        otherwise:           every row of the poll.
        """
        if not self.constituency:
            return []

        poll_wide = and_(model.constituency.is_(None), model.ward.is_(None))
        constituency_wide = and_(model.constituency == self.constituency, model.ward.is_(None))
        if self.ward:
            exact = and_(model.constituency == self.constituency, model.ward == self.ward)
            return [or_(poll_wide, constituency_wide, exact)]
        return [or_(poll_wide, constituency_wide)]
