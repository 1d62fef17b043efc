"""
Tests for bulk data input schemas.
"""

import pytest
from pydantic import ValidationError

from schemas.admin import BulkResponseUpsert


@pytest.mark.unit
class TestBulkResponseUpsert:
    def test_accepts_ratings_on_scale(self) -> None:
        data = BulkResponseUpsert.model_validate({"questionId": 2, "ratingValues": [1, 5, 10]})

        assert data.rating_values == [1, 5, 10]

    @pytest.mark.parametrize("value", [0, 11, 1000, -3])
    def test_rejects_ratings_off_scale(self, value) -> None:
        with pytest.raises(ValidationError):
            BulkResponseUpsert.model_validate({"questionId": 2, "ratingValues": [5, value]})

    @pytest.mark.parametrize("field", ["optionCounts", "competitorCounts"])
    def test_rejects_non_numeric_keys(self, field) -> None:
        with pytest.raises(ValidationError):
            BulkResponseUpsert.model_validate({"questionId": 1, field: {"Roads": 3}})

    def test_rejects_negative_counts(self) -> None:
        with pytest.raises(ValidationError):
            BulkResponseUpsert.model_validate({"questionId": 1, "optionCounts": {"11": -1}})
