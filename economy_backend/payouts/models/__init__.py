# payouts/models/__init__.py

from payouts.models.creator_account import CreatorAccount
from payouts.models.payout import Payout
from payouts.models.payout_lock import PayoutRequestLock

__all__ = ["Payout", "CreatorAccount", "PayoutRequestLock"]
