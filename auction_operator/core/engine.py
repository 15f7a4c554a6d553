"""
ReconciliationEngine - Decide and perform the next auction transition.

Each cycle:
- Reads the auction snapshot; a live auction is left alone
- Reads the winner of a closed auction
- Reads settlement progress only when a real winner exists
- Classifies the reads into an AuctionCase
- Dispatches the actions planned for that case, confirming each in turn

The engine keeps no memory between cycles. Whatever an earlier cycle did is
visible only through the contract state the next cycle reads, which lets the
operator resume correctly after any failure or restart.
"""

import asyncio
from decimal import Decimal
from typing import Callable, List, Optional

from auction_operator.core.dispatcher import ActionDispatcher
from auction_operator.core.errors import ClassificationError
from auction_operator.core.reader import StateReader
from auction_operator.core.state import (
    ZERO_PROOF,
    ActionKind,
    AuctionCase,
    AuctionSnapshot,
    CycleReport,
    PendingAction,
    SettlementState,
    WinnerInfo,
    claim_payment,
    end_auction_no_bids,
    start_auction,
    submit_proof,
)
from auction_operator.utils.logger import get_logger

logger = get_logger("engine")

ProofProvider = Callable[[WinnerInfo], bytes]


# =============================================================================
# Proof Providers
# =============================================================================


def placeholder_proof(winner: WinnerInfo) -> bytes:
    """
    Return bytes32(0) as the proof for any winner.

    The contract accepts this today, but it is not a real proof of delivery.
    Configure PROOF_HASH or inject a provider before relying on it. The
    engine warns whenever it actually submits this value.
    """
    return ZERO_PROOF


def fixed_proof(proof_hash: bytes) -> ProofProvider:
    """Provider that always returns the given 32-byte hash."""
    value = bytes(proof_hash)

    def provider(winner: WinnerInfo) -> bytes:
        return value

    return provider


# =============================================================================
# Classification
# =============================================================================


def classify_case(
    snapshot: AuctionSnapshot,
    winner: Optional[WinnerInfo] = None,
    settlement: Optional[SettlementState] = None,
) -> AuctionCase:
    """
    Map one cycle's reads to a decision case.

    Args:
        snapshot: Current auction state
        winner: Winner info; required when the auction is not active
        settlement: Admin state; required when a real winner exists

    Raises:
        ClassificationError: if a required read is missing or the reads
            contradict each other
    """
    if snapshot.is_active:
        return AuctionCase.ACTIVE

    if winner is None:
        raise ClassificationError("Auction closed but winner info was not read", step="classify")

    if not winner.has_winner:
        return AuctionCase.ENDED_NO_BIDS

    if settlement is None:
        raise ClassificationError("Winner exists but settlement state was not read", step="classify")

    if not settlement.proof_submitted:
        if settlement.claimed:
            raise ClassificationError(
                f"Payment claimed for token {winner.winning_token_id} before proof was submitted",
                step="classify",
            )
        return AuctionCase.ENDED_WINNER_PROOF_PENDING

    if not settlement.claimed:
        return AuctionCase.ENDED_WINNER_PAYMENT_PENDING

    return AuctionCase.ENDED_WINNER_SETTLED


def plan_actions(
    case: AuctionCase,
    winner: Optional[WinnerInfo],
    start_price: Decimal,
    end_price: Decimal,
    proof_provider: ProofProvider = placeholder_proof,
) -> List[PendingAction]:
    """
    Actions to take for a case, in dispatch order.

    ENDED_NO_BIDS yields two actions (close, then reopen) that together form
    one logical transition. Every other case yields at most one.
    """
    if case == AuctionCase.ACTIVE:
        return []
    if case == AuctionCase.ENDED_NO_BIDS:
        return [end_auction_no_bids(), start_auction(start_price, end_price)]
    if case == AuctionCase.ENDED_WINNER_PROOF_PENDING:
        return [submit_proof(winner.winning_token_id, proof_provider(winner))]
    if case == AuctionCase.ENDED_WINNER_PAYMENT_PENDING:
        return [claim_payment(winner.winning_token_id)]
    if case == AuctionCase.ENDED_WINNER_SETTLED:
        return [start_auction(start_price, end_price)]
    raise ClassificationError(f"No plan for case {case}", step="plan")


_CASE_MESSAGES = {
    AuctionCase.ENDED_NO_BIDS: "Auction ended with no bids. Closing and starting a new auction...",
    AuctionCase.ENDED_WINNER_PROOF_PENDING: "Proof not yet submitted. Submitting proof...",
    AuctionCase.ENDED_WINNER_PAYMENT_PENDING: "Proof submitted but payment not claimed. Claiming payment...",
    AuctionCase.ENDED_WINNER_SETTLED: "Auction is fully settled. Starting new auction...",
}


# =============================================================================
# Engine
# =============================================================================


class ReconciliationEngine:
    """
    Drives the auction contract one cycle at a time.

    reconcile() must not run concurrently with itself; the Scheduler
    guarantees this, and a lock here enforces it for direct callers.
    """

    def __init__(
        self,
        reader: StateReader,
        dispatcher: ActionDispatcher,
        start_price: Decimal = Decimal("100"),
        end_price: Decimal = Decimal("10"),
        proof_provider: ProofProvider = placeholder_proof,
        dry_run: bool = False,
    ):
        self.reader = reader
        self.dispatcher = dispatcher
        self.start_price = Decimal(start_price)
        self.end_price = Decimal(end_price)
        self.proof_provider = proof_provider
        self.dry_run = dry_run
        self._lock = asyncio.Lock()

    async def observe(self):
        """
        Read only what the decision needs.

        Returns:
            (case, snapshot, winner, settlement); winner and settlement are
            None when not read
        """
        snapshot = await self.reader.read_snapshot()
        if snapshot.is_active:
            return AuctionCase.ACTIVE, snapshot, None, None

        winner = await self.reader.read_winner()
        settlement = None
        if winner.has_winner:
            settlement = await self.reader.read_settlement()

        return classify_case(snapshot, winner, settlement), snapshot, winner, settlement

    async def reconcile(self) -> CycleReport:
        """
        Run one full cycle.

        Any error aborts the remaining actions and propagates to the caller;
        nothing is retried here.
        """
        async with self._lock:
            case, snapshot, winner, settlement = await self.observe()

            if case == AuctionCase.ACTIVE:
                logger.info(
                    f"Auction is active. Current price: {snapshot.current_price}, "
                    f"Time remaining: {snapshot.time_remaining} seconds"
                )
                return CycleReport(case=case, dry_run=self.dry_run)

            logger.info("Auction is no longer active.")
            if winner.has_winner:
                logger.info(
                    f"Auction ended with a winner ({winner.winner}), token {winner.winning_token_id}, "
                    f"bid {winner.winning_bid}. Settlement: proof_submitted={settlement.proof_submitted} "
                    f"claimed={settlement.claimed}"
                )

            actions = plan_actions(case, winner, self.start_price, self.end_price, self.proof_provider)
            logger.info(_CASE_MESSAGES[case])

            if self.dry_run:
                for action in actions:
                    logger.info(f"[dry-run] would dispatch {action.describe()}")
                return CycleReport(
                    case=case,
                    actions=tuple((action, None) for action in actions),
                    dry_run=True,
                )

            done = []
            for action in actions:
                if action.kind == ActionKind.SUBMIT_PROOF and action.proof_hash == ZERO_PROOF:
                    logger.warning(
                        f"Submitting placeholder zero proof for token {action.token_id}; "
                        "no real proof provider is configured"
                    )
                receipt = await self.dispatcher.dispatch(action)
                done.append((action, receipt))

            return CycleReport(case=case, actions=tuple(done))
