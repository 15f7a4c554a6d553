"""
Unit tests for the web3 ledger client.

The Web3 instance is replaced with a MagicMock, so these tests exercise the
client's error mapping and transaction flow without a node.
"""

from unittest.mock import MagicMock

import pytest
from web3 import HTTPProvider, LegacyWebSocketProvider
from web3.exceptions import ContractLogicError, TimeExhausted

from auction_operator.core.errors import ConfigError, DispatchError, TransportError
from auction_operator.ledger.web3_client import Web3AuctionContract, make_provider

PRIVATE_KEY = "0x" + "11" * 32
CONTRACT = "0x" + "22" * 20
TX_HASH = b"\x12" * 32


@pytest.fixture
def w3():
    mock = MagicMock()
    mock.eth.chain_id = 31337
    mock.eth.get_transaction_count.return_value = 4
    mock.eth.send_raw_transaction.return_value = TX_HASH
    return mock


@pytest.fixture
def client(w3):
    return Web3AuctionContract(w3, CONTRACT, PRIVATE_KEY, receipt_timeout=5)


class TestProvider:

    def test_http_provider(self):
        assert isinstance(make_provider("http://localhost:8545"), HTTPProvider)

    def test_websocket_provider(self):
        assert isinstance(make_provider("ws://localhost:8546"), LegacyWebSocketProvider)

    def test_unsupported_scheme(self):
        with pytest.raises(ConfigError):
            make_provider("ipc:///tmp/geth.ipc")

    def test_bad_private_key(self, w3):
        with pytest.raises(ConfigError):
            Web3AuctionContract(w3, CONTRACT, "0xnot-a-key")


class TestViews:

    def test_get_auction_state(self, client):
        client.contract.functions.getAuctionState.return_value.call.return_value = [5, True, 60]
        assert client.get_auction_state() == (5, True, 60)

    def test_read_failure_is_transport_error(self, client):
        client.contract.functions.getWinnerInfo.return_value.call.side_effect = ConnectionError("down")

        with pytest.raises(TransportError) as excinfo:
            client.get_winner_info()
        assert excinfo.value.call == "getWinnerInfo"


class TestCommands:

    def test_send_builds_signs_and_broadcasts(self, client, w3):
        function = client.contract.functions.claimPayment.return_value
        function.build_transaction.return_value = {
            "to": CONTRACT,
            "from": client.account.address,
            "nonce": 4,
            "chainId": 31337,
            "gas": 100000,
            "maxFeePerGas": 2 * 10**9,
            "maxPriorityFeePerGas": 10**9,
            "value": 0,
            "data": "0x",
        }

        tx_hash = client.claim_payment(7)

        client.contract.functions.claimPayment.assert_called_with(7)
        params = function.build_transaction.call_args[0][0]
        assert params["nonce"] == 4
        assert params["chainId"] == 31337
        assert w3.eth.send_raw_transaction.called
        assert tx_hash == "0x" + "12" * 32

    def test_revert_on_estimate_is_dispatch_error(self, client):
        function = client.contract.functions.endAuctionNoBids.return_value
        function.build_transaction.side_effect = ContractLogicError("execution reverted: auction active")

        with pytest.raises(DispatchError, match="rejected"):
            client.end_auction_no_bids()

    def test_receipt(self, client, w3):
        w3.eth.wait_for_transaction_receipt.return_value = {
            "transactionHash": TX_HASH,
            "blockNumber": 12,
            "status": 0,
        }
        receipt = client.wait_for_confirmation("0x" + "12" * 32)

        assert receipt.block_number == 12
        assert not receipt.succeeded

    def test_receipt_timeout_is_dispatch_error(self, client, w3):
        w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("no receipt")

        with pytest.raises(DispatchError, match="No receipt"):
            client.wait_for_confirmation("0x" + "12" * 32)


class TestEvents:

    def test_fetch_events_normalizes_logs(self, client):
        event = client.contract.events.BidPlaced
        event.get_logs.return_value = [{
            "event": "BidPlaced",
            "args": {"bidder": CONTRACT, "bidAmount": 1, "tokenId": 2},
            "transactionHash": TX_HASH,
            "blockNumber": 9,
            "logIndex": 3,
        }]

        logs = client.fetch_events("BidPlaced", 5, 9)

        event.get_logs.assert_called_with(from_block=5, to_block=9)
        assert logs == [{
            "event": "BidPlaced",
            "args": {"bidder": CONTRACT, "bidAmount": 1, "tokenId": 2},
            "transactionHash": "0x" + "12" * 32,
            "blockNumber": 9,
            "logIndex": 3,
        }]

    def test_close_is_idempotent(self, client, w3):
        client.close()
        client.close()
        assert w3.provider.disconnect.call_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
