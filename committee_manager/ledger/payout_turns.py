"""
Payout-Turn Initializer

Computes which share receives the pooled payout in which period.

- MANUAL: turn i goes to member_ids[i], in input order.
- BIDDING: same sequential order; the real winner of each period is
  assigned later through payout-turn updates.
- RANDOM: one unbiased Fisher-Yates permutation, drawn once here. The
  result is stored, so the order never changes on re-read.

Every computed turn starts unpaid with no payout date.
"""

import random
from typing import Optional, Sequence

from committee_manager.models.committee import PayoutMethod, PayoutTurn


def shuffle_member_ids(member_ids: Sequence[str], rng: Optional[random.Random] = None) -> list[str]:
    """Fisher-Yates shuffle returning a new list."""
    rng = rng or random.SystemRandom()
    shuffled = list(member_ids)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def compute_turns(
    member_ids: Sequence[str],
    method: PayoutMethod,
    duration: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> list[PayoutTurn]:
    """
    Compute the payout turns for a committee's shares.

    Args:
        member_ids: Ordered member ids, one entry per share
        method: Payout method of the committee
        duration: Number of periods; turn indices wrap into 0..duration-1
        rng: Random source for the RANDOM method (injectable for tests)

    Returns:
        One PayoutTurn per share
    """
    if method == PayoutMethod.RANDOM:
        ordered = shuffle_member_ids(member_ids, rng)
    else:
        ordered = list(member_ids)

    return [
        PayoutTurn(
            member_id=member_id,
            turn_month_index=index % duration if duration else index,
            paid_out=False,
        )
        for index, member_id in enumerate(ordered)
    ]
