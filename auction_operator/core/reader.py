"""
StateReader - Fresh reads of the auction contract.

Every call goes to the ledger; nothing is cached between calls or cycles.
"""

import asyncio

from auction_operator.core.errors import OperatorError, TransportError
from auction_operator.core.state import (
    AuctionSnapshot,
    SettlementState,
    WinnerInfo,
    from_base_units,
)
from auction_operator.ledger.client import AuctionContractClient
from auction_operator.utils.logger import get_logger

logger = get_logger("reader")


class StateReader:
    """Async view over the contract's three state queries."""

    def __init__(self, client: AuctionContractClient, decimals: int = 18):
        self.client = client
        self.decimals = decimals

    async def _call(self, step: str, call: str, fn):
        try:
            return await asyncio.to_thread(fn)
        except OperatorError as e:
            e.step = e.step or step
            e.call = e.call or call
            raise
        except (OSError, ValueError) as e:
            raise TransportError(f"{call}() failed: {e}", step=step, call=call)

    async def read_snapshot(self) -> AuctionSnapshot:
        price, active, remaining = await self._call(
            "read_snapshot", "getAuctionState", self.client.get_auction_state
        )
        snapshot = AuctionSnapshot(
            current_price=from_base_units(price, self.decimals),
            is_active=active,
            time_remaining=remaining,
        )
        logger.debug(f"Snapshot: {snapshot}")
        return snapshot

    async def read_winner(self) -> WinnerInfo:
        winner, bid, token_id = await self._call(
            "read_winner", "getWinnerInfo", self.client.get_winner_info
        )
        info = WinnerInfo(
            winner=winner,
            winning_bid=from_base_units(bid, self.decimals),
            winning_token_id=token_id,
        )
        logger.debug(f"Winner: {info}")
        return info

    async def read_settlement(self) -> SettlementState:
        """Only valid once read_winner() has returned a real winner."""
        proof_submitted, claimed, ended = await self._call(
            "read_settlement", "getAdminState", self.client.get_admin_state
        )
        state = SettlementState(proof_submitted=proof_submitted, claimed=claimed, ended=ended)
        logger.debug(f"Settlement: {state}")
        return state
