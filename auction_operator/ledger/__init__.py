"""Ledger transport: client interface, web3 implementation and contract ABI"""
from auction_operator.ledger.abi import AUCTION_ABI, EVENT_NAMES
from auction_operator.ledger.client import AuctionContractClient

__all__ = ["AUCTION_ABI", "EVENT_NAMES", "AuctionContractClient"]
