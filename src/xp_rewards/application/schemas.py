"""Pydantic schemas for the xp_rewards API."""

from pydantic import BaseModel

from src.xp_rewards.domain.valuator import RewardValuation


class RewardItem(BaseModel):
    type: str
    description: str
    cash_value: str
    points_required: int


class UpcomingRewardItem(RewardItem):
    points_needed: int
    progress: float


class RewardValuationResponse(BaseModel):
    program: str
    balance: int
    point_value: str
    cash_value: str
    affordable: list[RewardItem]
    upcoming: list[UpcomingRewardItem]

    @classmethod
    def from_domain(cls, v: RewardValuation) -> "RewardValuationResponse":
        return cls(
            program=v.program.value,
            balance=v.balance,
            point_value=str(v.point_value),
            cash_value=str(v.cash_value),
            affordable=[
                RewardItem(
                    type=p.reward.type.value,
                    description=p.reward.description,
                    cash_value=str(p.reward.cash_value),
                    points_required=p.points_required,
                )
                for p in v.affordable
            ],
            upcoming=[
                UpcomingRewardItem(
                    type=u.reward.type.value,
                    description=u.reward.description,
                    cash_value=str(u.reward.cash_value),
                    points_required=u.points_required,
                    points_needed=u.points_needed,
                    progress=float(u.progress),
                )
                for u in v.upcoming
            ],
        )
