"""Tests for proposal vote tallies."""

from tripplanner.modules.planning.stats import compute_proposal_stats, empty_stats, find_user_vote


class TestProposalStats:
    """Tests for compute_proposal_stats."""

    def test_no_votes(self):
        assert compute_proposal_stats([]) == empty_stats()

    def test_vote_types_map_to_up_down_and_neutral(self):
        votes = [
            {"user_id": "a", "vote_type": "available"},
            {"user_id": "b", "vote_type": "available"},
            {"user_id": "c", "vote_type": "unavailable"},
            {"user_id": "d", "vote_type": "maybe"},
        ]
        assert compute_proposal_stats(votes) == {
            "upvotes": 2,
            "downvotes": 1,
            "neutral_votes": 1,
            "total_votes": 4,
            "net_score": 1,
        }

    def test_net_score_can_be_negative(self):
        votes = [{"vote_type": "unavailable"}, {"vote_type": "unavailable"}]
        assert compute_proposal_stats(votes)["net_score"] == -2

    def test_find_user_vote(self):
        votes = [{"user_id": "a", "vote_type": "maybe"}]
        assert find_user_vote(votes, "a") == "maybe"
        assert find_user_vote(votes, "b") is None
        assert find_user_vote(votes, None) is None
