"""Tier derivation from monthly converted volume.

recompute() is pure and idempotent for a given `now`:
  - a period older than the current UTC month is rolled forward and
    monthly_points reset to 0;
  - tier = max(tier earned by this month's volume, tier still held);
  - moving up a tier starts a new hold of that tier's hold_days.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from src.xp_common.datetime_utils import ensure_utc, month_start
from src.xp_common.enums import MembershipTier
from src.xp_tier.domain.models import UserStats
from src.xp_tier.domain.policy import TIER_POLICIES, policy_for


def tier_for_volume(monthly_points: int) -> MembershipTier:
    tier = MembershipTier.STANDARD
    for policy in TIER_POLICIES:
        if monthly_points >= policy.threshold:
            tier = policy.tier
    return tier


def held_tier(stats: UserStats, now: datetime) -> MembershipTier:
    if stats.tier_expires_at is not None and ensure_utc(stats.tier_expires_at) > ensure_utc(now):
        return MembershipTier(stats.tier)
    return MembershipTier.STANDARD


def needs_rollover(stats: UserStats, now: datetime) -> bool:
    return stats.period_start is None or ensure_utc(stats.period_start) < month_start(now)


def recompute(stats: UserStats, now: datetime) -> UserStats:
    now = ensure_utc(now)
    result = replace(stats)
    if needs_rollover(result, now):
        result.monthly_points = 0
        result.period_start = month_start(now)

    earned = tier_for_volume(result.monthly_points)
    held = held_tier(stats, now)
    if policy_for(earned).rank > policy_for(held).rank:
        result.tier = earned
        result.tier_expires_at = now + timedelta(days=policy_for(earned).hold_days)
    else:
        result.tier = held
        if held == MembershipTier.STANDARD:
            result.tier_expires_at = None
    return result


def apply_conversion(stats: UserStats, amount: int, fee: int, now: datetime) -> UserStats:
    """Stats after a completed conversion of `amount` points charged `fee`."""
    result = recompute(stats, now)
    result.monthly_points += amount
    result.points_converted += amount
    result.fees_paid += fee
    return recompute(result, now)
