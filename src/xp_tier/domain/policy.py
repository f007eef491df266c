"""Membership tier policy table.

Thresholds are monthly converted points and must be non-decreasing in rank
order. `allowance=None` means unlimited fee-free conversion.
"""

from dataclasses import dataclass

from src.xp_common.enums import MembershipTier


@dataclass(frozen=True, slots=True)
class TierPolicy:
    tier: MembershipTier
    rank: int
    threshold: int             # monthly points needed to reach the tier
    allowance: int | None      # fee-free monthly points, None = unlimited
    conversion_fee_bps: int    # charged on the part past the allowance
    p2p_min_bps: int           # facilitation fee floor for trade offers
    p2p_max_bps: int           # facilitation fee ceiling for trade offers
    hold_days: int             # how long the tier is kept after reaching it


TIER_POLICIES: tuple[TierPolicy, ...] = (
    TierPolicy(MembershipTier.STANDARD, 0, 0, 10_000, 50, 50, 300, 30),
    TierPolicy(MembershipTier.SILVER, 1, 20_000, 20_000, 45, 40, 250, 45),
    TierPolicy(MembershipTier.GOLD, 2, 50_000, 50_000, 35, 30, 200, 60),
    TierPolicy(MembershipTier.PLATINUM, 3, 100_000, None, 0, 20, 150, 90),
)

_BY_TIER = {p.tier: p for p in TIER_POLICIES}


def policy_for(tier: MembershipTier | str) -> TierPolicy:
    return _BY_TIER[MembershipTier(tier)]


def next_policy(tier: MembershipTier | str) -> TierPolicy | None:
    rank = policy_for(tier).rank
    return TIER_POLICIES[rank + 1] if rank + 1 < len(TIER_POLICIES) else None
