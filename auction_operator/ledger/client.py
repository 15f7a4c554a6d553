"""
Client - The ledger transport seam.

AuctionContractClient is the only interface the operator uses to reach the
auction contract. Methods are blocking; the async components run them in a
worker thread. Implementations raise TransportError for connection and RPC
failures and DispatchError when a command is rejected or fails to confirm.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from auction_operator.core.state import Receipt


class AuctionContractClient(ABC):
    """Blocking access to one auction contract on behalf of one operator account."""

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @abstractmethod
    def get_auction_state(self) -> Tuple[int, bool, int]:
        """Return (current_price, is_active, time_remaining) in base units/seconds."""

    @abstractmethod
    def get_winner_info(self) -> Tuple[str, int, int]:
        """Return (winner, winning_bid, winning_token_id)."""

    @abstractmethod
    def get_admin_state(self) -> Tuple[bool, bool, bool]:
        """Return (proof_submitted, claimed, ended)."""

    # -------------------------------------------------------------------------
    # Commands - each returns the transaction hash once broadcast
    # -------------------------------------------------------------------------

    @abstractmethod
    def end_auction_no_bids(self) -> str: ...

    @abstractmethod
    def start_auction(self, start_price: int, end_price: int) -> str: ...

    @abstractmethod
    def submit_proof(self, token_id: int, proof_hash: bytes) -> str: ...

    @abstractmethod
    def claim_payment(self, token_id: int) -> str: ...

    @abstractmethod
    def wait_for_confirmation(self, tx_hash: str) -> Receipt:
        """Block until the transaction is mined and return its receipt."""

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    @abstractmethod
    def latest_block(self) -> int: ...

    @abstractmethod
    def fetch_events(self, event_name: str, from_block: int, to_block: int) -> List[Dict[str, Any]]:
        """
        Return decoded events in [from_block, to_block].

        Each entry is {"event", "args", "transactionHash", "blockNumber",
        "logIndex"} with args keyed by the ABI parameter names.
        """

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release the underlying connection. Safe to call more than once."""
