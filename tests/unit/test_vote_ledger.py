"""Tests for the vote ledger: upsert semantics and preconditions."""

from uuid import uuid4

import pytest

from rmf_backend.exceptions import (
    ForbiddenError,
    InvalidStateError,
    SelfVoteError,
    TargetNotFoundError,
)
from rmf_backend.services.vote_ledger import VoteLedger
from tests.factories import InMemorySubmissionRepository, InMemoryVoteRepository, make_user


@pytest.fixture
def ledger(store):
    return VoteLedger(InMemorySubmissionRepository(store), InMemoryVoteRepository(store))


class TestCastVote:
    @pytest.mark.asyncio
    async def test_same_vote_twice_keeps_one_row(self, ledger, store, pending_threat):
        voter = make_user("voter-1")
        await ledger.cast_vote("threat", pending_threat, voter, 1)
        await ledger.cast_vote("threat", pending_threat, voter, 1)

        rows = store.votes_for("threat", pending_threat)
        assert len(rows) == 1
        assert rows[0]["vote_value"] == 1

    @pytest.mark.asyncio
    async def test_revote_overwrites_value(self, ledger, store, pending_threat):
        voter = make_user("voter-1")
        await ledger.cast_vote("threat", pending_threat, voter, 1)
        first = dict(store.votes_for("threat", pending_threat)[0])

        await ledger.cast_vote("threat", pending_threat, voter, -1)

        rows = store.votes_for("threat", pending_threat)
        assert len(rows) == 1
        assert rows[0]["vote_value"] == -1
        assert rows[0]["updated_at"] > first["updated_at"]

    @pytest.mark.asyncio
    async def test_cast_locks_target_before_tallying(self, ledger, store, pending_threat):
        await ledger.cast_vote("threat", pending_threat, make_user("voter-1"), 1)
        assert store.locks == [("threat", pending_threat)]

    @pytest.mark.asyncio
    async def test_voter_names_are_stored(self, ledger, store, pending_threat):
        voter = make_user("voter-7", username="satoshi", name="Satoshi")
        await ledger.cast_vote("threat", pending_threat, voter, 1)

        row = store.votes_for("threat", pending_threat)[0]
        assert row["voter_username"] == "satoshi"
        assert row["voter_name"] == "Satoshi"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [1, -1])
    async def test_self_vote_forbidden(self, ledger, store, pending_threat, author, value):
        with pytest.raises(SelfVoteError) as exc_info:
            await ledger.cast_vote("threat", pending_threat, author, value)

        assert isinstance(exc_info.value, ForbiddenError)
        assert exc_info.value.error_type == "forbidden"
        assert store.votes_for("threat", pending_threat) == []

    @pytest.mark.asyncio
    async def test_self_vote_forbidden_regardless_of_tally(self, ledger, pending_threat, author):
        for i in range(1, 3):
            await ledger.cast_vote("threat", pending_threat, make_user(f"voter-{i}"), 1)

        with pytest.raises(SelfVoteError):
            await ledger.cast_vote("threat", pending_threat, author, 1)

    @pytest.mark.asyncio
    async def test_missing_target_not_found(self, ledger):
        with pytest.raises(TargetNotFoundError) as exc_info:
            await ledger.cast_vote("fud", uuid4(), make_user("voter-1"), 1)
        assert exc_info.value.error_type == "not_found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["published", "archived"])
    async def test_terminal_target_invalid_state(self, ledger, store, status):
        target_id = store.add_submission("threat", status=status)

        with pytest.raises(InvalidStateError) as exc_info:
            await ledger.cast_vote("threat", target_id, make_user("voter-1"), 1)

        assert exc_info.value.current_status == status
        assert store.votes_for("threat", target_id) == []

    @pytest.mark.asyncio
    async def test_draft_target_is_voteable(self, ledger, store, pending_fud):
        await ledger.cast_vote("fud", pending_fud, make_user("voter-1"), -1)
        assert len(store.votes_for("fud", pending_fud)) == 1

    @pytest.mark.asyncio
    async def test_not_found_checked_before_self_vote(self, ledger, author):
        with pytest.raises(TargetNotFoundError):
            await ledger.cast_vote("threat", uuid4(), author, 1)

    @pytest.mark.asyncio
    async def test_invalid_value_rejected(self, ledger, store, pending_threat):
        with pytest.raises(ValueError):
            await ledger.cast_vote("threat", pending_threat, make_user("voter-1"), 2)
        assert store.votes_for("threat", pending_threat) == []


class TestRecordAndRemove:
    @pytest.mark.asyncio
    async def test_record_skips_status_checks(self, ledger, store):
        target_id = store.add_submission("threat", status="published")
        await ledger.record("threat", target_id, make_user("voter-9"), 1)
        assert len(store.votes_for("threat", target_id)) == 1

    @pytest.mark.asyncio
    async def test_remove_existing_vote(self, ledger, store, pending_threat):
        voter = make_user("voter-1")
        await ledger.cast_vote("threat", pending_threat, voter, 1)

        assert await ledger.remove_vote("threat", pending_threat, voter.user_id) is True
        assert store.votes_for("threat", pending_threat) == []

    @pytest.mark.asyncio
    async def test_remove_absent_vote_is_noop(self, ledger, store, pending_threat):
        await ledger.cast_vote("threat", pending_threat, make_user("voter-2"), 1)

        assert await ledger.remove_vote("threat", pending_threat, "voter-1") is False
        assert len(store.votes_for("threat", pending_threat)) == 1
