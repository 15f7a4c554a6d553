"""
Runtime - Wires the ledger client to the engine, scheduler and listener.

The scheduler and the listener run as separate asyncio tasks and share
nothing but the client connection.
"""

import asyncio
from typing import Optional

from auction_operator.core.config import OperatorConfig
from auction_operator.core.dispatcher import ActionDispatcher
from auction_operator.core.engine import (
    ProofProvider,
    ReconciliationEngine,
    fixed_proof,
    placeholder_proof,
)
from auction_operator.core.reader import StateReader
from auction_operator.core.scheduler import Scheduler
from auction_operator.ledger.client import AuctionContractClient
from auction_operator.notify.listener import NotificationListener
from auction_operator.utils.logger import get_logger

logger = get_logger("operator")


class AuctionOperator:
    """Long-lived operator process for one auction contract."""

    def __init__(
        self,
        client: AuctionContractClient,
        config: OperatorConfig,
        proof_provider: Optional[ProofProvider] = None,
        dry_run: bool = False,
        listen: bool = True,
    ):
        self.client = client
        self.config = config

        if proof_provider is None:
            proof_provider = fixed_proof(config.proof_hash) if config.proof_hash else placeholder_proof

        self.reader = StateReader(client, decimals=config.token_decimals)
        self.dispatcher = ActionDispatcher(client, decimals=config.token_decimals)
        self.engine = ReconciliationEngine(
            self.reader,
            self.dispatcher,
            start_price=config.start_price,
            end_price=config.end_price,
            proof_provider=proof_provider,
            dry_run=dry_run,
        )
        self.scheduler = Scheduler(self.engine.reconcile, period=config.poll_interval)
        self.listener = (
            NotificationListener(client, poll_interval=config.event_poll_interval, decimals=config.token_decimals)
            if listen
            else None
        )
        self._tasks = []

    async def run(self) -> None:
        """Run until cancelled or stop() is called, then close the connection."""
        if self.listener:
            self._tasks.append(asyncio.create_task(self.listener.run(), name="listener"))
        self._tasks.append(asyncio.create_task(self.scheduler.run(), name="scheduler"))
        try:
            # A dead listener must not end the run; the scheduler keeps going
            results = await asyncio.gather(*self._tasks, return_exceptions=True)
            for task, result in zip(self._tasks, results):
                if isinstance(result, Exception):
                    logger.error(f"Task {task.get_name()} exited with {result!r}")
        finally:
            await self.shutdown()

    def stop(self) -> None:
        self.scheduler.stop()
        if self.listener:
            self.listener.stop()

    async def shutdown(self) -> None:
        """Cancel both tasks and close the client. In-flight commands are left to the next start."""
        self.stop()
        for task in self._tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self.client.close()

        stats = self.scheduler.stats
        logger.info(
            f"Operator stopped after {stats.cycles_run} cycles "
            f"({stats.cycles_failed} failed, {stats.ticks_skipped} ticks skipped)"
        )
