"""
Shared fixtures: an in-memory auction contract client.

FakeAuctionContract records every view and command, applies each command's
effect to its state once the command is confirmed, and can be told to fail,
revert or stall specific calls.
"""

import threading
import time
from typing import Any, Dict, List, Optional, Tuple

import pytest

from auction_operator.core.config import OperatorConfig
from auction_operator.core.errors import DispatchError, TransportError
from auction_operator.core.state import NULL_ADDRESS, Receipt
from auction_operator.ledger.client import AuctionContractClient

UNIT = 10**18
WINNER = "0x" + "ab" * 20


class FakeAuctionContract(AuctionContractClient):
    def __init__(
        self,
        price: int = 50 * UNIT,
        active: bool = False,
        remaining: int = 0,
        winner: str = NULL_ADDRESS,
        winning_bid: int = 0,
        token_id: int = 0,
        proof_submitted: bool = False,
        claimed: bool = False,
        ended: bool = False,
    ):
        self.price = price
        self.active = active
        self.remaining = remaining
        self.winner = winner
        self.winning_bid = winning_bid
        self.token_id = token_id
        self.proof_submitted = proof_submitted
        self.claimed = claimed
        self.ended = ended

        self.reads: List[str] = []
        self.commands: List[Tuple[str, tuple]] = []
        self.failures: Dict[str, Exception] = {}
        self.reverts: set = set()
        self.confirm_delay = 0.0
        self.closed = False

        self.block = 100
        self.logs: List[Dict[str, Any]] = []
        self.fetch_ranges: List[Tuple[str, int, int]] = []
        self._pending: Dict[str, Tuple[str, tuple]] = {}
        self._lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    # -- test controls --------------------------------------------------------

    def fail(self, name: str, error: Optional[Exception] = None) -> None:
        """Make the next call to `name` raise."""
        self.failures[name] = error or DispatchError(f"{name} rejected", call=name)

    def _maybe_fail(self, name: str) -> None:
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    def set_winner(self, winner: str = WINNER, bid: int = 42 * UNIT, token_id: int = 7) -> None:
        self.winner, self.winning_bid, self.token_id = winner, bid, token_id

    @property
    def command_names(self) -> List[str]:
        return [name for name, _ in self.commands]

    # -- views ----------------------------------------------------------------

    def get_auction_state(self):
        self.reads.append("getAuctionState")
        self._maybe_fail("getAuctionState")
        return self.price, self.active, self.remaining

    def get_winner_info(self):
        self.reads.append("getWinnerInfo")
        self._maybe_fail("getWinnerInfo")
        return self.winner, self.winning_bid, self.token_id

    def get_admin_state(self):
        self.reads.append("getAdminState")
        self._maybe_fail("getAdminState")
        return self.proof_submitted, self.claimed, self.ended

    # -- commands -------------------------------------------------------------

    def _send(self, name: str, *args) -> str:
        self._maybe_fail(name)
        with self._lock:
            self.commands.append((name, args))
            self.block += 1
            tx_hash = "0x%064x" % len(self.commands)
            self._pending[tx_hash] = (name, args)
        return tx_hash

    def end_auction_no_bids(self) -> str:
        return self._send("endAuctionNoBids")

    def start_auction(self, start_price: int, end_price: int) -> str:
        return self._send("startAuction", start_price, end_price)

    def submit_proof(self, token_id: int, proof_hash: bytes) -> str:
        return self._send("submitProof", token_id, proof_hash)

    def claim_payment(self, token_id: int) -> str:
        return self._send("claimPayment", token_id)

    def wait_for_confirmation(self, tx_hash: str) -> Receipt:
        name, args = self._pending.pop(tx_hash)
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.confirm_delay:
                time.sleep(self.confirm_delay)
            self._maybe_fail(f"confirm:{name}")
        finally:
            with self._lock:
                self.in_flight -= 1

        if name in self.reverts:
            return Receipt(tx_hash=tx_hash, block_number=self.block, status=0)

        self._apply(name, args)
        return Receipt(tx_hash=tx_hash, block_number=self.block, status=1)

    def _apply(self, name: str, args: tuple) -> None:
        if name == "endAuctionNoBids":
            self.ended = True
        elif name == "startAuction":
            self.active = True
            self.price = args[0]
            self.remaining = 3600
            self.winner, self.winning_bid, self.token_id = NULL_ADDRESS, 0, 0
            self.proof_submitted = self.claimed = self.ended = False
        elif name == "submitProof":
            self.proof_submitted = True
        elif name == "claimPayment":
            self.claimed = True

    # -- events ---------------------------------------------------------------

    def emit(self, event: str, **args) -> None:
        self.block += 1
        self.logs.append({
            "event": event,
            "args": args,
            "transactionHash": "0x%064x" % (1000 + len(self.logs)),
            "blockNumber": self.block,
            "logIndex": 0,
        })

    def latest_block(self) -> int:
        self._maybe_fail("latest_block")
        return self.block

    def fetch_events(self, event_name: str, from_block: int, to_block: int):
        self._maybe_fail("fetch_events")
        self.fetch_ranges.append((event_name, from_block, to_block))
        return [
            log for log in self.logs
            if log["event"] == event_name and from_block <= log["blockNumber"] <= to_block
        ]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def contract():
    """Closed auction with no bids."""
    return FakeAuctionContract()


@pytest.fixture
def config():
    return OperatorConfig(
        provider_url="http://localhost:8545",
        private_key="0x" + "11" * 32,
        contract_address="0x" + "22" * 20,
        poll_interval=0.05,
        event_poll_interval=0.05,
    )


@pytest.fixture
def transport_error():
    return TransportError("connection reset", call="getAuctionState")
