"""Unit tests for tally value objects."""

from uuid import uuid4

import pytest

from assembly_engine.domain.models.tally import (
    Decision,
    ManualTally,
    OfficialResult,
    OfficialSource,
)


class TestManualTally:
    """Test the ManualTally model."""

    def test_consistent_count(self) -> None:
        assert ManualTally(for_weight=6, against_weight=3, abstain_weight=1, total=10).is_consistent

    def test_sum_mismatch(self) -> None:
        tally = ManualTally(for_weight=6, against_weight=3, abstain_weight=0, total=10)
        assert tally.problems() == ["for + against + abstain must equal the total"]

    def test_every_problem_is_reported(self) -> None:
        tally = ManualTally(for_weight=-1, against_weight=0, abstain_weight=0, total=0)
        problems = tally.problems()
        assert "total must be greater than zero" in problems
        assert "counts must not be negative" in problems

    def test_part_above_total(self) -> None:
        tally = ManualTally(for_weight=12, against_weight=-2, abstain_weight=0, total=10)
        assert "no count may exceed the total" in tally.problems()


class TestOfficialResult:
    """Test the OfficialResult model."""

    @pytest.fixture
    def motion_id(self):
        return uuid4()

    def _result(self, motion_id, **overrides):
        values = {
            "motion_id": motion_id,
            "source": OfficialSource.EVOTE,
            "for_weight": 6.0,
            "against_weight": 4.0,
            "abstain_weight": 0.0,
            "total": 10.0,
            "decision": Decision.ADOPTED,
            "reason": "Adopted",
        }
        values.update(overrides)
        return OfficialResult(**values)

    def test_hash_is_deterministic(self, motion_id) -> None:
        assert self._result(motion_id).result_hash == self._result(motion_id).result_hash
        assert len(self._result(motion_id).result_hash) == 64

    def test_hash_changes_with_content(self, motion_id) -> None:
        first = self._result(motion_id)
        second = self._result(motion_id, for_weight=5.0, against_weight=5.0)
        assert first.result_hash != second.result_hash

    def test_float_noise_does_not_change_hash(self, motion_id) -> None:
        first = self._result(motion_id)
        second = self._result(motion_id, for_weight=6.0 + 1e-12)
        assert first.result_hash == second.result_hash

    def test_to_dict_carries_hash(self, motion_id) -> None:
        data = self._result(motion_id).to_dict()
        assert data["decision"] == "adopted"
        assert data["result_hash"] == self._result(motion_id).result_hash
