"""
State - Observed auction state and the actions derived from it.

All types here are immutable snapshots of what the contract reported in one
reconciliation cycle. Nothing is persisted; every cycle reads them afresh.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext
from enum import Enum
from typing import Optional, Tuple

# =============================================================================
# Constants
# =============================================================================

# Sentinel returned by getWinnerInfo() when the auction closed without bids
NULL_ADDRESS = "0x" + "0" * 40

# bytes32(0), the placeholder proof the operator submits by default
ZERO_PROOF = b"\x00" * 32

DEFAULT_DECIMALS = 18

# Enough precision to hold any uint256 exactly
UINT256_DIGITS = 80


# =============================================================================
# Unit conversion
# =============================================================================


def from_base_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    """Convert an on-chain integer amount to token units."""
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        return Decimal(amount).scaleb(-decimals)


def to_base_units(amount: Decimal, decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert token units to an on-chain integer amount.

    Raises:
        ValueError: if the amount has more precision than `decimals` allows
    """
    with localcontext() as ctx:
        ctx.prec = UINT256_DIGITS
        scaled = Decimal(amount).scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{amount} has more than {decimals} decimal places")
        return int(scaled)


# =============================================================================
# Observed State
# =============================================================================


@dataclass(frozen=True)
class AuctionSnapshot:
    """Result of getAuctionState()."""
    current_price: Decimal
    is_active: bool
    time_remaining: int  # seconds


@dataclass(frozen=True)
class WinnerInfo:
    """
    Result of getWinnerInfo().

    A closed auction without bids reports NULL_ADDRESS as its winner rather
    than a separate flag, so use `has_winner` instead of truthiness.
    """
    winner: str
    winning_bid: Decimal
    winning_token_id: int

    @property
    def has_winner(self) -> bool:
        return self.winner.lower() != NULL_ADDRESS


@dataclass(frozen=True)
class SettlementState:
    """
    Result of getAdminState().

    Only meaningful once a winner exists. `ended` is logged but plays no part
    in classification.
    """
    proof_submitted: bool
    claimed: bool
    ended: bool = False


# =============================================================================
# Derived Case
# =============================================================================


class AuctionCase(str, Enum):
    """Decision case derived from one cycle's reads."""
    ACTIVE = "active"
    ENDED_NO_BIDS = "ended_no_bids"
    ENDED_WINNER_PROOF_PENDING = "ended_winner_proof_pending"
    ENDED_WINNER_PAYMENT_PENDING = "ended_winner_payment_pending"
    ENDED_WINNER_SETTLED = "ended_winner_settled"


# =============================================================================
# Actions
# =============================================================================


class ActionKind(str, Enum):
    """State-transition commands the operator can issue."""
    END_AUCTION_NO_BIDS = "endAuctionNoBids"
    START_AUCTION = "startAuction"
    SUBMIT_PROOF = "submitProof"
    CLAIM_PAYMENT = "claimPayment"


@dataclass(frozen=True)
class PendingAction:
    """A command to dispatch and confirm before the cycle completes."""
    kind: ActionKind
    start_price: Optional[Decimal] = None
    end_price: Optional[Decimal] = None
    token_id: Optional[int] = None
    proof_hash: Optional[bytes] = None

    def describe(self) -> str:
        if self.kind == ActionKind.START_AUCTION:
            return f"{self.kind.value}({self.start_price}, {self.end_price})"
        if self.kind == ActionKind.SUBMIT_PROOF:
            return f"{self.kind.value}({self.token_id}, 0x{self.proof_hash.hex()})"
        if self.kind == ActionKind.CLAIM_PAYMENT:
            return f"{self.kind.value}({self.token_id})"
        return f"{self.kind.value}()"


def end_auction_no_bids() -> PendingAction:
    return PendingAction(kind=ActionKind.END_AUCTION_NO_BIDS)


def start_auction(start_price: Decimal, end_price: Decimal) -> PendingAction:
    return PendingAction(
        kind=ActionKind.START_AUCTION,
        start_price=Decimal(start_price),
        end_price=Decimal(end_price),
    )


def submit_proof(token_id: int, proof_hash: bytes) -> PendingAction:
    return PendingAction(kind=ActionKind.SUBMIT_PROOF, token_id=token_id, proof_hash=bytes(proof_hash))


def claim_payment(token_id: int) -> PendingAction:
    return PendingAction(kind=ActionKind.CLAIM_PAYMENT, token_id=token_id)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class Receipt:
    """Confirmation of a committed command."""
    tx_hash: str
    block_number: int
    status: int = 1

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class CycleReport:
    """What a single reconciliation cycle observed and did."""
    case: AuctionCase
    actions: Tuple[Tuple[PendingAction, Optional[Receipt]], ...] = ()
    dry_run: bool = False

    @property
    def dispatched(self) -> Tuple[PendingAction, ...]:
        return tuple(action for action, _ in self.actions)
