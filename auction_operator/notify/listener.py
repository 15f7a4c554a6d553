"""
NotificationListener - Observability tap on the auction contract's events.

Polls event logs by block range on its own task and renders each event to
the log. Handlers only format and emit; they never dispatch commands or
touch anything the reconciliation engine reads.
"""

import asyncio
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from auction_operator.core.errors import OperatorError
from auction_operator.ledger.abi import EVENT_NAMES
from auction_operator.ledger.client import AuctionContractClient
from auction_operator.notify.events import ChainEvent, parse_event
from auction_operator.utils.logger import get_logger

logger = get_logger("events")

EventHandler = Callable[[ChainEvent], None]

SEPARATOR = "-----------------------------"


class NotificationListener:
    """Fetches new contract events and passes them to per-event handlers."""

    def __init__(
        self,
        client: AuctionContractClient,
        poll_interval: float = 5.0,
        decimals: int = 18,
        max_block_range: int = 1000,
    ):
        self.client = client
        self.poll_interval = poll_interval
        self.decimals = decimals
        self.max_block_range = max_block_range
        self.next_block: Optional[int] = None
        self.events_seen = 0
        self._running = False
        self._handlers: Dict[str, EventHandler] = {}

        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        for name in EVENT_NAMES:
            self._handlers[name] = self.render_event

    def register_handler(self, event_name: str, handler: EventHandler) -> None:
        """Replace the handler for one event type."""
        if event_name not in EVENT_NAMES:
            raise ValueError(f"Unknown event: {event_name}")
        self._handlers[event_name] = handler

    def render_event(self, event: ChainEvent) -> None:
        """Default handler: log the event as a framed block."""
        lines = [SEPARATOR, *event.render(self.decimals), SEPARATOR]
        logger.info("\n".join(lines))

    async def start(self) -> None:
        """Begin at the chain head; only events after startup are reported."""
        head = await asyncio.to_thread(self.client.latest_block)
        self.next_block = head + 1
        logger.info(f"Listening for auction events from block {self.next_block}...")

    async def poll(self) -> int:
        """
        Fetch and handle events up to the current head.

        The range is walked in chunks of at most `max_block_range` blocks.
        The cursor advances only after every event type of a chunk was
        fetched, so a transport failure retries that chunk next time.

        Returns:
            Number of events handled
        """
        if self.next_block is None:
            await self.start()

        head = await asyncio.to_thread(self.client.latest_block)
        handled = 0
        while self.next_block <= head:
            to_block = min(head, self.next_block + self.max_block_range - 1)
            logs: List[dict] = []
            for name in self._handlers:
                logs.extend(await asyncio.to_thread(self.client.fetch_events, name, self.next_block, to_block))
            self.next_block = to_block + 1

            logs.sort(key=lambda log: (log.get("blockNumber", 0), log.get("logIndex", 0)))
            for log in logs:
                self._handle(log)
            handled += len(logs)
        return handled

    def _handle(self, log: dict) -> None:
        try:
            event = parse_event(log)
        except (KeyError, ValidationError) as e:
            logger.warning(f"Unparseable {log.get('event', '?')} event in {log.get('transactionHash')}: {e}")
            return

        self.events_seen += 1
        try:
            self._handlers[log["event"]](event)
        except Exception:
            logger.exception(f"Handler for {log['event']} failed")

    async def run(self) -> None:
        """Poll until stop() is called."""
        self._running = True
        while self._running:
            try:
                await self.poll()
            except asyncio.CancelledError:
                raise
            except OperatorError as e:
                logger.warning(f"Event poll failed, retrying: {e}")
            except Exception:
                logger.exception("Event poll failed with an unexpected error, retrying")
            await asyncio.sleep(self.poll_interval)

    def stop(self) -> None:
        self._running = False
