"""Reconciliation worker tailing AchievementMinted events into the mint ledger.

Each cycle reads the chain head, fetches one bounded window of blocks past
the watermark and records every decoded event. The watermark only moves once
the whole window is recorded, so a failed window is fetched again on the
next cycle. The ledger dedupes on (transaction hash, log index), which makes
the replay harmless.

On a cold start the watermark is seeded a fixed number of blocks behind the
head. Mints older than that are not picked up without a manual backfill.
"""

import asyncio
import logging
from typing import Protocol

from trophy_mint.models import MintEvent

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 15.0
BLOCKS_PER_POLL = 500
COLD_START_LOOKBACK_BLOCKS = 100


class ChainReader(Protocol):
    async def block_number(self) -> int: ...

    async def mint_events(self, from_block: int, to_block: int) -> list[MintEvent]: ...


class MintSink(Protocol):
    def record(self, event: MintEvent) -> bool: ...


class ReconciliationWorker:
    """Single-task poll loop. Cycles never overlap."""

    def __init__(
        self,
        reader: ChainReader,
        sink: MintSink,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        blocks_per_poll: int = BLOCKS_PER_POLL,
        cold_start_lookback: int = COLD_START_LOOKBACK_BLOCKS,
        watermark: int | None = None,
    ):
        self.reader = reader
        self.sink = sink
        self.poll_interval = poll_interval
        self.blocks_per_poll = blocks_per_poll
        self.cold_start_lookback = cold_start_lookback
        self.watermark = watermark

    async def run_cycle(self) -> bool:
        """Process at most one window. Returns False if the cycle failed."""
        try:
            head = await self.reader.block_number()

            if self.watermark is None:
                self.watermark = max(head - self.cold_start_lookback, 0)
                logger.info("Initial poll: starting from block %s", self.watermark)

            if self.watermark >= head:
                logger.debug("No new blocks to process (current: %s)", head)
                return True

            from_block = self.watermark + 1
            to_block = min(self.watermark + self.blocks_per_poll, head)
            logger.info("Fetching logs from block %s to %s", from_block, to_block)

            events = await self.reader.mint_events(from_block, to_block)
            new = 0
            for event in events:
                if self.sink.record(event):
                    new += 1
                    logger.info(
                        "AchievementMinted: owner=%s token=%s app=%s achievement=%s block=%s tx=%s",
                        event.owner,
                        event.token_id,
                        event.app_id,
                        event.achievement_id,
                        event.block_number,
                        event.transaction_hash,
                    )
            if events:
                logger.info("Recorded %d new of %d mint events", new, len(events))

            self.watermark = to_block
            logger.info("Advanced watermark to %s", self.watermark)
            return True
        except Exception:
            logger.exception("Error during polling, window will be retried")
            return False

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until ``stop`` is set. The next cycle is scheduled whatever the outcome."""
        stop = stop or asyncio.Event()
        logger.info("Starting polling with interval: %ss", self.poll_interval)
        while not stop.is_set():
            await self.run_cycle()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Worker stopped at watermark %s", self.watermark)
