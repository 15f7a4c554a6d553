"""ABI fragments for the auction contract: the events and functions the operator uses."""

EVENT_NAMES = (
    "AuctionStarted",
    "AuctionEnded",
    "BidPlaced",
    "ProofSubmitted",
    "PaymentClaimed",
    "WinningAdSelected",
)


def _param(name, type_, indexed=None):
    entry = {"name": name, "type": type_, "internalType": type_}
    if indexed is not None:
        entry["indexed"] = indexed
    return entry


def _event(name, *inputs):
    return {"type": "event", "name": name, "anonymous": False, "inputs": list(inputs)}


def _function(name, inputs=(), outputs=(), mutability="nonpayable"):
    return {
        "type": "function",
        "name": name,
        "inputs": list(inputs),
        "outputs": list(outputs),
        "stateMutability": mutability,
    }


AUCTION_ABI = [
    # Events
    _event(
        "AuctionStarted",
        _param("startPrice", "uint256", False),
        _param("endPrice", "uint256", False),
        _param("startTime", "uint256", False),
        _param("duration", "uint256", False),
    ),
    _event(
        "AuctionEnded",
        _param("winner", "address", False),
        _param("winningBid", "uint256", False),
        _param("tokenId", "uint256", False),
    ),
    _event(
        "BidPlaced",
        _param("bidder", "address", False),
        _param("bidAmount", "uint256", False),
        _param("tokenId", "uint256", False),
    ),
    _event(
        "ProofSubmitted",
        _param("tokenId", "uint256", False),
        _param("proofHash", "bytes32", False),
    ),
    _event(
        "PaymentClaimed",
        _param("tokenId", "uint256", False),
        _param("amount", "uint256", False),
    ),
    _event(
        "WinningAdSelected",
        _param("tokenId", "uint256", True),
        _param("title", "string", False),
        _param("content", "string", False),
        _param("imageURL", "string", False),
        _param("publisher", "address", True),
        _param("bidAmount", "uint256", False),
    ),
    # State transitions
    _function("startAuction", [_param("_startPrice", "uint256"), _param("_endPrice", "uint256")]),
    _function("endAuctionNoBids"),
    _function("submitProof", [_param("_tokenId", "uint256"), _param("_proofHash", "bytes32")]),
    _function("claimPayment", [_param("_tokenId", "uint256")]),
    # Views
    _function(
        "getAuctionState",
        outputs=[
            _param("currentPrice", "uint256"),
            _param("isActive", "bool"),
            _param("timeRemaining", "uint256"),
        ],
        mutability="view",
    ),
    _function(
        "getWinnerInfo",
        outputs=[
            _param("winner", "address"),
            _param("winningBid", "uint256"),
            _param("winningTokenId", "uint256"),
        ],
        mutability="view",
    ),
    _function(
        "getAdminState",
        outputs=[
            _param("proofSubmitted", "bool"),
            _param("claimed", "bool"),
            _param("ended", "bool"),
        ],
        mutability="view",
    ),
]
