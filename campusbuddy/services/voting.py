"""
One vote per (subject, user).

Same type again removes the vote; the opposite type moves one unit between
the counters; a first vote adds one. Counters never go below zero.
"""
from dataclasses import dataclass
from typing import Optional

from campusbuddy.models.feedback import VoteType


@dataclass(frozen=True)
class VoteOutcome:
    upvotes: int
    downvotes: int
    # vote type the user now holds, None once removed
    current: Optional[VoteType]


def _dec(value: int) -> int:
    return max(0, value - 1)


def apply_vote(upvotes: int, downvotes: int, previous: Optional[VoteType], submitted: VoteType) -> VoteOutcome:
    if previous is None:
        if submitted == VoteType.UP:
            return VoteOutcome(upvotes + 1, downvotes, submitted)
        return VoteOutcome(upvotes, downvotes + 1, submitted)

    if previous == submitted:
        if submitted == VoteType.UP:
            return VoteOutcome(_dec(upvotes), downvotes, None)
        return VoteOutcome(upvotes, _dec(downvotes), None)

    if submitted == VoteType.UP:
        return VoteOutcome(upvotes + 1, _dec(downvotes), submitted)
    return VoteOutcome(_dec(upvotes), downvotes + 1, submitted)


def apply_like(likes: int, liked_before: bool) -> int:
    """Likes are a one-sided vote"""
    return _dec(likes) if liked_before else likes + 1
