"""Tests for request validation."""

from uuid import uuid4

import pytest
from pydantic import TypeAdapter, ValidationError

from rmf_backend.schemas import (
    FudCreateRequest,
    FudVoteRequest,
    ThreatCreateRequest,
    ThreatVoteRequest,
    VoteRequest,
)

vote_adapter = TypeAdapter(VoteRequest)


class TestVoteRequest:
    def test_threat_body_selects_threat_model(self):
        body = vote_adapter.validate_python(
            {"target_type": "threat", "target_id": str(uuid4()), "vote_value": 1}
        )
        assert isinstance(body, ThreatVoteRequest)

    def test_fud_body_selects_fud_model(self):
        body = vote_adapter.validate_python(
            {"target_type": "fud", "target_id": str(uuid4()), "vote_value": -1}
        )
        assert isinstance(body, FudVoteRequest)
        assert body.vote_value == -1

    @pytest.mark.parametrize("value", [0, 2, -2, "up"])
    def test_vote_value_must_be_plus_or_minus_one(self, value):
        with pytest.raises(ValidationError):
            vote_adapter.validate_python(
                {"target_type": "threat", "target_id": str(uuid4()), "vote_value": value}
            )

    def test_unknown_target_type(self):
        with pytest.raises(ValidationError):
            vote_adapter.validate_python(
                {"target_type": "bip", "target_id": str(uuid4()), "vote_value": 1}
            )

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            vote_adapter.validate_python(
                {
                    "target_type": "threat",
                    "target_id": str(uuid4()),
                    "vote_value": 1,
                    "voter_id": "someone-else",
                }
            )

    def test_target_id_must_be_uuid(self):
        with pytest.raises(ValidationError):
            vote_adapter.validate_python(
                {"target_type": "threat", "target_id": "not-a-uuid", "vote_value": 1}
            )


class TestSubmissionRequests:
    def test_threat_likelihood_range(self):
        with pytest.raises(ValidationError):
            ThreatCreateRequest(name="n", description="d", likelihood=6, impact=1)

    def test_fud_category_enum(self):
        body = FudCreateRequest(narrative="Quantum breaks Bitcoin", category="QUANTUM")
        assert body.category.value == "QUANTUM"
        assert body.validity_score == 0

        with pytest.raises(ValidationError):
            FudCreateRequest(narrative="x", category="ALIENS")
