"""
Web3AuctionContract - web3.py implementation of the ledger client.

Owns the provider, the operator account and the contract handle. Commands are
built with the operator as sender, signed locally and broadcast raw; the
receipt wait is a separate call so the dispatcher controls confirmation.
"""

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from eth_account import Account
from web3 import HTTPProvider, LegacyWebSocketProvider, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from auction_operator.core.config import OperatorConfig
from auction_operator.core.errors import ConfigError, DispatchError, TransportError
from auction_operator.core.state import Receipt
from auction_operator.ledger.abi import AUCTION_ABI
from auction_operator.ledger.client import AuctionContractClient
from auction_operator.utils.logger import get_logger

logger = get_logger("ledger")

T = TypeVar("T")

# Errors surfaced by web3/requests/websockets for a failed RPC
RPC_ERRORS = (Web3Exception, OSError, ValueError)


def make_provider(url: str, timeout: float = 30.0):
    """Pick the provider class from the endpoint scheme."""
    if url.startswith(("ws://", "wss://")):
        return LegacyWebSocketProvider(url, websocket_timeout=timeout)
    if url.startswith(("http://", "https://")):
        return HTTPProvider(url, request_kwargs={"timeout": timeout})
    raise ConfigError(f"Unsupported provider URL scheme: {url}", step="startup")


class Web3AuctionContract(AuctionContractClient):
    """Auction contract client backed by a synchronous Web3 instance."""

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        private_key: str,
        receipt_timeout: float = 600.0,
    ):
        try:
            self.account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid operator private key: {e}", step="startup")

        self.w3 = w3
        self.address = Web3.to_checksum_address(contract_address)
        self.contract = w3.eth.contract(address=self.address, abi=AUCTION_ABI)
        self.receipt_timeout = receipt_timeout
        self._chain_id: Optional[int] = None
        # Commands are single-flight already; this only guards nonce lookup
        self._send_lock = threading.Lock()
        self._closed = False

    @classmethod
    def connect(cls, config: OperatorConfig) -> "Web3AuctionContract":
        """
        Open a connection and verify the endpoint answers.

        Raises:
            ConfigError: bad endpoint scheme or private key
            TransportError: endpoint unreachable
        """
        w3 = Web3(make_provider(config.provider_url))
        try:
            connected = w3.is_connected()
        except RPC_ERRORS as e:
            raise TransportError(f"Cannot reach {config.provider_url}: {e}", step="startup", call="is_connected")
        if not connected:
            raise TransportError(f"Cannot reach {config.provider_url}", step="startup", call="is_connected")

        client = cls(
            w3,
            config.contract_address,
            config.private_key,
            receipt_timeout=config.receipt_timeout,
        )
        logger.info(f"Connected to {config.provider_url}")
        logger.info(f"Operator account: {client.account.address}")
        logger.info(f"Auction contract: {client.address}")
        return client

    # =========================================================================
    # Views
    # =========================================================================

    def _read(self, name: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except RPC_ERRORS as e:
            raise TransportError(f"{name}() failed: {e}", call=name)

    def get_auction_state(self) -> Tuple[int, bool, int]:
        price, active, remaining = self._read(
            "getAuctionState", self.contract.functions.getAuctionState().call
        )
        return int(price), bool(active), int(remaining)

    def get_winner_info(self) -> Tuple[str, int, int]:
        winner, bid, token_id = self._read(
            "getWinnerInfo", self.contract.functions.getWinnerInfo().call
        )
        return str(winner), int(bid), int(token_id)

    def get_admin_state(self) -> Tuple[bool, bool, bool]:
        proof_submitted, claimed, ended = self._read(
            "getAdminState", self.contract.functions.getAdminState().call
        )
        return bool(proof_submitted), bool(claimed), bool(ended)

    # =========================================================================
    # Commands
    # =========================================================================

    def _chain(self) -> int:
        if self._chain_id is None:
            self._chain_id = self._read("chain_id", lambda: self.w3.eth.chain_id)
        return self._chain_id

    def _send(self, name: str, function) -> str:
        """Build, sign and broadcast a contract call; return the tx hash."""
        with self._send_lock:
            nonce = self._read(
                "get_transaction_count",
                lambda: self.w3.eth.get_transaction_count(self.account.address, "pending"),
            )
            try:
                tx = function.build_transaction({
                    "from": self.account.address,
                    "nonce": nonce,
                    "chainId": self._chain(),
                })
                signed = self.account.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except ContractLogicError as e:
                raise DispatchError(f"{name}() rejected: {e}", call=name)
            except OSError as e:
                raise TransportError(f"{name}() not sent: {e}", call=name)
            except (Web3Exception, ValueError) as e:
                raise DispatchError(f"{name}() failed: {e}", call=name)

        return Web3.to_hex(tx_hash)

    def end_auction_no_bids(self) -> str:
        return self._send("endAuctionNoBids", self.contract.functions.endAuctionNoBids())

    def start_auction(self, start_price: int, end_price: int) -> str:
        return self._send("startAuction", self.contract.functions.startAuction(start_price, end_price))

    def submit_proof(self, token_id: int, proof_hash: bytes) -> str:
        return self._send("submitProof", self.contract.functions.submitProof(token_id, proof_hash))

    def claim_payment(self, token_id: int) -> str:
        return self._send("claimPayment", self.contract.functions.claimPayment(token_id))

    def wait_for_confirmation(self, tx_hash: str) -> Receipt:
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except TimeExhausted:
            raise DispatchError(
                f"No receipt for {tx_hash} after {self.receipt_timeout}s",
                call="wait_for_transaction_receipt",
            )
        except RPC_ERRORS as e:
            raise TransportError(f"Receipt lookup for {tx_hash} failed: {e}", call="wait_for_transaction_receipt")

        return Receipt(
            tx_hash=Web3.to_hex(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            status=int(receipt["status"]),
        )

    # =========================================================================
    # Events
    # =========================================================================

    def latest_block(self) -> int:
        return int(self._read("block_number", lambda: self.w3.eth.block_number))

    def fetch_events(self, event_name: str, from_block: int, to_block: int) -> List[Dict[str, Any]]:
        event = getattr(self.contract.events, event_name)
        logs = self._read(
            f"get_logs:{event_name}",
            lambda: event.get_logs(from_block=from_block, to_block=to_block),
        )
        return [
            {
                "event": log["event"],
                "args": dict(log["args"]),
                "transactionHash": Web3.to_hex(log["transactionHash"]),
                "blockNumber": int(log["blockNumber"]),
                "logIndex": int(log["logIndex"]),
            }
            for log in logs
        ]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        disconnect = getattr(self.w3.provider, "disconnect", None)
        if callable(disconnect):
            disconnect()
        logger.info("Ledger connection closed")
