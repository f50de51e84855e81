"""End-to-end tests of the review state machine through VotingService."""

import asyncio

import pytest

from rmf_backend.exceptions import InvalidStateError, SelfVoteError
from rmf_backend.services.tally_service import Tally
from tests.factories import make_user, make_voters


async def cast_all(service, target_id, voters, value, target_type="threat"):
    outcome = None
    for voter in voters:
        outcome = await service.submit_vote(target_type, target_id, voter, value)
    return outcome


class TestIdempotentVoting:
    @pytest.mark.asyncio
    async def test_repeat_vote_leaves_tally_unchanged(self, voting_service, store, pending_threat):
        voter = make_user("voter-1")
        first = await voting_service.submit_vote("threat", pending_threat, voter, 1)
        second = await voting_service.submit_vote("threat", pending_threat, voter, 1)

        assert first.tally == second.tally == Tally(approvals=1, rejections=0)
        assert len(store.votes_for("threat", pending_threat)) == 1

    @pytest.mark.asyncio
    async def test_vote_flip_counts_latest_value_only(self, voting_service, pending_threat):
        voter = make_user("voter-1")
        await voting_service.submit_vote("threat", pending_threat, voter, 1)
        outcome = await voting_service.submit_vote("threat", pending_threat, voter, -1)

        assert outcome.tally == Tally(approvals=0, rejections=1)
        assert outcome.net_score == -1


class TestThresholdCrossing:
    @pytest.mark.asyncio
    async def test_publish_at_threshold(self, voting_service, store, pending_threat):
        voters = make_voters(3)
        outcome = await cast_all(voting_service, pending_threat, voters[:2], 1)
        assert outcome.net_score == 2
        assert outcome.new_status is None
        assert store.status_of("threat", pending_threat) == "under_review"

        outcome = await voting_service.submit_vote("threat", pending_threat, voters[2], 1)

        assert outcome.net_score == 3
        assert outcome.new_status == "published"
        assert store.status_of("threat", pending_threat) == "published"
        publish = [e for e in store.audit if e.action == "vote_publish"]
        assert len(publish) == 1
        assert publish[0].diff["net_score"] == 3

    @pytest.mark.asyncio
    async def test_archive_at_negative_threshold(self, voting_service, store, pending_fud):
        outcome = await cast_all(voting_service, pending_fud, make_voters(3), -1, "fud")

        assert outcome.net_score == -3
        assert outcome.new_status == "archived"
        assert store.status_of("fud", pending_fud) == "archived"
        assert store.audit_actions(pending_fud) == ["vote_archive"]

    @pytest.mark.asyncio
    async def test_net_two_never_transitions(self, voting_service, store, pending_threat):
        # 4 approvals, 2 rejections, interleaved: net never exceeds 2
        order = [(1, 1), (2, -1), (3, 1), (4, -1), (5, 1), (6, 1)]
        for n, value in order:
            outcome = await voting_service.submit_vote(
                "threat", pending_threat, make_user(f"voter-{n}"), value
            )
            assert outcome.new_status is None

        assert outcome.net_score == 2
        assert store.status_of("threat", pending_threat) == "under_review"
        assert store.audit == []

    @pytest.mark.asyncio
    async def test_self_vote_rejected_near_threshold(self, voting_service, store, pending_threat, author):
        await cast_all(voting_service, pending_threat, make_voters(2), 1)

        with pytest.raises(SelfVoteError):
            await voting_service.submit_vote("threat", pending_threat, author, 1)
        assert store.status_of("threat", pending_threat) == "under_review"


class TestRaces:
    @pytest.mark.asyncio
    async def test_concurrent_votes_publish_once(self, voting_service, store, pending_threat):
        await cast_all(voting_service, pending_threat, make_voters(2), 1)

        first, second = await asyncio.gather(
            voting_service.submit_vote("threat", pending_threat, make_user("voter-3"), 1),
            voting_service.submit_vote("threat", pending_threat, make_user("voter-4"), 1),
        )

        assert first.net_score >= 3 and second.net_score >= 3
        assert first.new_status == second.new_status == "published"
        assert store.audit_actions(pending_threat) == ["vote_publish"]
        assert len(store.votes_for("threat", pending_threat)) == 4


class TestTerminalStability:
    @pytest.mark.asyncio
    async def test_late_votes_recorded_without_retransition(self, voting_service, store, pending_threat):
        await cast_all(voting_service, pending_threat, make_voters(3), 1)
        assert store.status_of("threat", pending_threat) == "published"

        # Votes landing after the transition are kept in the ledger
        for voter in make_voters(6, prefix="late"):
            await voting_service.ledger.record("threat", pending_threat, voter, -1)
        tally = await voting_service.tallies.tally("threat", pending_threat)
        result = await voting_service.controller.apply("threat", pending_threat, tally)

        assert tally.net_score == -3
        assert result.applied is False
        assert result.new_status == "published"
        assert store.status_of("threat", pending_threat) == "published"
        assert store.audit_actions(pending_threat) == ["vote_publish"]

    @pytest.mark.asyncio
    async def test_public_vote_on_terminal_target_rejected(self, voting_service, store, pending_threat):
        await cast_all(voting_service, pending_threat, make_voters(3), 1)

        with pytest.raises(InvalidStateError):
            await voting_service.submit_vote("threat", pending_threat, make_user("voter-9"), -1)


class TestViews:
    @pytest.mark.asyncio
    async def test_tally_view_with_viewer(self, voting_service, pending_threat):
        voter = make_user("voter-1")
        await voting_service.submit_vote("threat", pending_threat, voter, -1)

        view = await voting_service.tally_view("threat", pending_threat, voter)

        assert view == {
            "approvals": 0,
            "rejections": 1,
            "net_score": -1,
            "user_vote": -1,
            "threshold": 3,
        }

    @pytest.mark.asyncio
    async def test_tally_view_anonymous(self, voting_service, pending_threat):
        view = await voting_service.tally_view("threat", pending_threat)
        assert view["user_vote"] is None
        assert view["net_score"] == 0

    @pytest.mark.asyncio
    async def test_retract_vote(self, voting_service, store, pending_threat):
        voter = make_user("voter-1")
        await voting_service.submit_vote("threat", pending_threat, voter, 1)

        assert await voting_service.retract_vote("threat", pending_threat, voter) is True
        assert await voting_service.retract_vote("threat", pending_threat, voter) is False
        assert store.votes_for("threat", pending_threat) == []

    @pytest.mark.asyncio
    async def test_annotate_attaches_tallies_and_user_vote(
        self, voting_service, store, pending_threat, pending_fud
    ):
        viewer = make_user("voter-1")
        await voting_service.submit_vote("threat", pending_threat, viewer, 1)
        await voting_service.submit_vote("fud", pending_fud, make_user("voter-2"), -1)
        records = await voting_service.ledger.submissions.list_pending()

        annotated = {a.record.id: a for a in await voting_service.annotate(records, viewer)}

        assert annotated[pending_threat].tally == Tally(1, 0)
        assert annotated[pending_threat].user_vote == 1
        assert annotated[pending_fud].tally == Tally(0, 1)
        assert annotated[pending_fud].user_vote is None
