"""Vote tallies for date and destination proposals."""
from typing import Dict, Iterable, List, Optional


def empty_stats() -> Dict[str, int]:
    return {
        "upvotes": 0,
        "downvotes": 0,
        "neutral_votes": 0,
        "total_votes": 0,
        "net_score": 0,
    }


def compute_proposal_stats(votes: Iterable[dict]) -> Dict[str, int]:
    """Count available as up, unavailable as down and maybe as neutral."""
    stats = empty_stats()
    for vote in votes:
        vote_type = vote.get("vote_type")
        if vote_type == "available":
            stats["upvotes"] += 1
        elif vote_type == "unavailable":
            stats["downvotes"] += 1
        elif vote_type == "maybe":
            stats["neutral_votes"] += 1
        else:
            continue
        stats["total_votes"] += 1
    stats["net_score"] = stats["upvotes"] - stats["downvotes"]
    return stats


def group_by(rows: Iterable[dict], key: str) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {}
    for row in rows:
        value = row.get(key)
        if value is not None:
            grouped.setdefault(value, []).append(row)
    return grouped


def find_user_vote(votes: Iterable[dict], user_id: Optional[str]) -> Optional[str]:
    if not user_id:
        return None
    for vote in votes:
        if vote.get("user_id") == user_id:
            return vote.get("vote_type")
    return None
