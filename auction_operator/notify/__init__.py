"""Contract event models and the notification listener"""
from auction_operator.notify.events import (
    ChainEvent,
    AuctionStarted,
    AuctionEnded,
    BidPlaced,
    ProofSubmitted,
    PaymentClaimed,
    WinningAdSelected,
    EVENT_MODELS,
    parse_event,
)
from auction_operator.notify.listener import NotificationListener

__all__ = [
    "ChainEvent",
    "AuctionStarted",
    "AuctionEnded",
    "BidPlaced",
    "ProofSubmitted",
    "PaymentClaimed",
    "WinningAdSelected",
    "EVENT_MODELS",
    "parse_event",
    "NotificationListener",
]
