"""
Events - Typed models for the auction contract's notifications.

Each model validates the decoded log arguments (keyed by their ABI names)
and knows how to render itself as a block of log lines.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auction_operator.core.state import from_base_units


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class ChainEvent(BaseModel, ABC):
    """Fields shared by every contract event."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    tx_hash: str = Field(alias="transactionHash")
    block_number: int = Field(alias="blockNumber", default=0)

    @field_validator("tx_hash", mode="before")
    @classmethod
    def _normalize_hash(cls, value):
        return _hex(value)

    @classmethod
    def from_log(cls, log: Dict[str, Any]) -> "ChainEvent":
        """Build from a client log entry ({"args", "transactionHash", "blockNumber"})."""
        return cls.model_validate({
            **log.get("args", {}),
            "transactionHash": log.get("transactionHash", ""),
            "blockNumber": log.get("blockNumber", 0),
        })

    @abstractmethod
    def render(self, decimals: int = 18) -> List[str]:
        """Log lines describing the event, amounts scaled by `decimals`."""


class AuctionStarted(ChainEvent):
    start_price: int = Field(alias="startPrice")
    end_price: int = Field(alias="endPrice")
    start_time: int = Field(alias="startTime")
    duration: int

    def render(self, decimals: int = 18) -> List[str]:
        started = datetime.fromtimestamp(self.start_time, tz=timezone.utc)
        return [
            "Event: AuctionStarted",
            f"  Start Price: {from_base_units(self.start_price, decimals)}",
            f"  End Price:   {from_base_units(self.end_price, decimals)}",
            f"  Start Time:  {started.isoformat()}",
            f"  Duration:    {self.duration} seconds",
            f"  Tx Hash:     {self.tx_hash}",
        ]


class AuctionEnded(ChainEvent):
    winner: str
    winning_bid: int = Field(alias="winningBid")
    token_id: int = Field(alias="tokenId")

    def render(self, decimals: int = 18) -> List[str]:
        return [
            "Event: AuctionEnded",
            f"  Winner:       {self.winner}",
            f"  Winning Bid:  {from_base_units(self.winning_bid, decimals)}",
            f"  Token ID:     {self.token_id}",
            f"  Tx Hash:      {self.tx_hash}",
        ]


class BidPlaced(ChainEvent):
    bidder: str
    bid_amount: int = Field(alias="bidAmount")
    token_id: int = Field(alias="tokenId")

    def render(self, decimals: int = 18) -> List[str]:
        return [
            "Event: BidPlaced",
            f"  Bidder:     {self.bidder}",
            f"  Bid Amount: {from_base_units(self.bid_amount, decimals)}",
            f"  Token ID:   {self.token_id}",
            f"  Tx Hash:    {self.tx_hash}",
        ]


class ProofSubmitted(ChainEvent):
    token_id: int = Field(alias="tokenId")
    proof_hash: str = Field(alias="proofHash")

    @field_validator("proof_hash", mode="before")
    @classmethod
    def _normalize_proof(cls, value):
        return _hex(value)

    def render(self, decimals: int = 18) -> List[str]:
        return [
            "Event: ProofSubmitted",
            f"  Token ID:  {self.token_id}",
            f"  Proof:     {self.proof_hash}",
            f"  Tx Hash:   {self.tx_hash}",
        ]


class PaymentClaimed(ChainEvent):
    token_id: int = Field(alias="tokenId")
    amount: int

    def render(self, decimals: int = 18) -> List[str]:
        return [
            "Event: PaymentClaimed",
            f"  Token ID: {self.token_id}",
            f"  Amount:   {from_base_units(self.amount, decimals)}",
            f"  Tx Hash:  {self.tx_hash}",
        ]


class WinningAdSelected(ChainEvent):
    token_id: int = Field(alias="tokenId")
    title: str
    content: str
    image_url: str = Field(alias="imageURL")
    publisher: str
    bid_amount: int = Field(alias="bidAmount")

    def render(self, decimals: int = 18) -> List[str]:
        return [
            "Event: WinningAdSelected",
            f"  Token ID:   {self.token_id}",
            f"  Title:      {self.title}",
            f"  Content:    {self.content}",
            f"  Image URL:  {self.image_url}",
            f"  Publisher:  {self.publisher}",
            f"  Bid Amount: {from_base_units(self.bid_amount, decimals)}",
            f"  Tx Hash:    {self.tx_hash}",
        ]


EVENT_MODELS: Dict[str, Type[ChainEvent]] = {
    "AuctionStarted": AuctionStarted,
    "AuctionEnded": AuctionEnded,
    "BidPlaced": BidPlaced,
    "ProofSubmitted": ProofSubmitted,
    "PaymentClaimed": PaymentClaimed,
    "WinningAdSelected": WinningAdSelected,
}


def parse_event(log: Dict[str, Any]) -> ChainEvent:
    """
    Parse a client log entry into its typed model.

    Raises:
        KeyError: unknown event name
        pydantic.ValidationError: malformed arguments
    """
    return EVENT_MODELS[log["event"]].from_log(log)
