"""
ActionDispatcher - Submit state transitions and wait for confirmation.

Each method returns only once the command is mined. A reverted receipt is a
failure. Commands are not idempotent on the ledger, so callers must never
resubmit an action that may already have taken effect.
"""

import asyncio
from decimal import Decimal

from auction_operator.core.errors import DispatchError, OperatorError
from auction_operator.core.state import (
    ActionKind,
    PendingAction,
    Receipt,
    to_base_units,
)
from auction_operator.ledger.client import AuctionContractClient
from auction_operator.utils.logger import get_logger
from auction_operator.utils.validation import (
    validate_price,
    validate_proof_hash,
    validate_uint,
)

logger = get_logger("dispatcher")


def _require(check) -> None:
    ok, error = check
    if not ok:
        raise DispatchError(f"Invalid argument: {error}", step="validate")


class ActionDispatcher:
    """Async front-end over the client's commands."""

    def __init__(self, client: AuctionContractClient, decimals: int = 18):
        self.client = client
        self.decimals = decimals

    async def _submit_and_confirm(self, name: str, fn, *args) -> Receipt:
        try:
            tx_hash = await asyncio.to_thread(fn, *args)
            logger.info(f"{name}() called. Tx Hash: {tx_hash}")
            receipt = await asyncio.to_thread(self.client.wait_for_confirmation, tx_hash)
        except OperatorError as e:
            e.step = e.step or "dispatch"
            e.call = e.call or name
            raise
        except (OSError, ValueError) as e:
            raise DispatchError(f"{name}() failed: {e}", step="dispatch", call=name)

        if not receipt.succeeded:
            raise DispatchError(
                f"{name}() reverted in tx {receipt.tx_hash} (block {receipt.block_number})",
                step="confirm",
                call=name,
            )

        logger.info(f"{name}() confirmed in block {receipt.block_number}")
        return receipt

    async def end_auction_no_bids(self) -> Receipt:
        return await self._submit_and_confirm(
            ActionKind.END_AUCTION_NO_BIDS.value, self.client.end_auction_no_bids
        )

    async def start_auction(self, start_price: Decimal, end_price: Decimal) -> Receipt:
        _require(validate_price(start_price, "start_price"))
        _require(validate_price(end_price, "end_price"))
        try:
            start_units = to_base_units(start_price, self.decimals)
            end_units = to_base_units(end_price, self.decimals)
        except ValueError as e:
            raise DispatchError(f"Invalid argument: {e}", step="validate")
        return await self._submit_and_confirm(
            ActionKind.START_AUCTION.value, self.client.start_auction, start_units, end_units
        )

    async def submit_proof(self, token_id: int, proof_hash: bytes) -> Receipt:
        _require(validate_uint(token_id, "token_id"))
        _require(validate_proof_hash(proof_hash))
        return await self._submit_and_confirm(
            ActionKind.SUBMIT_PROOF.value, self.client.submit_proof, token_id, bytes(proof_hash)
        )

    async def claim_payment(self, token_id: int) -> Receipt:
        _require(validate_uint(token_id, "token_id"))
        return await self._submit_and_confirm(
            ActionKind.CLAIM_PAYMENT.value, self.client.claim_payment, token_id
        )

    async def dispatch(self, action: PendingAction) -> Receipt:
        """Route a PendingAction to its command."""
        if action.kind == ActionKind.END_AUCTION_NO_BIDS:
            return await self.end_auction_no_bids()
        if action.kind == ActionKind.START_AUCTION:
            return await self.start_auction(action.start_price, action.end_price)
        if action.kind == ActionKind.SUBMIT_PROOF:
            return await self.submit_proof(action.token_id, action.proof_hash)
        if action.kind == ActionKind.CLAIM_PAYMENT:
            return await self.claim_payment(action.token_id)
        raise DispatchError(f"Unknown action kind: {action.kind}", step="dispatch")
