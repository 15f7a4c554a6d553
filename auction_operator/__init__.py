"""
Auction Operator

Keeps an on-chain descending-price auction cycling:
- Polls the auction contract and classifies its state
- Closes, settles and restarts auctions with confirmed transactions
- Renders the contract's events to the log
"""
