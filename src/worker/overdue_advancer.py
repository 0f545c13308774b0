"""Overdue Advancement Background Worker

Periodically persists the unpaid -> overdue transition for invoices past
their due date. Can be run as a standalone script or from a scheduler.
"""

import asyncio
import logging
from typing import Optional

from config import ApplicationConfig
from src.app.store import AdvanceOverdueResultDTO, InvoiceStore
from src.depends import get_invoice_store
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class OverdueAdvancerWorker:
    """
    Background worker for overdue status advancement

    Features:
    - Marks unpaid invoices past their due date as overdue
    - Statistics stay read-only; this worker is the only scheduled writer
    - Can run once or continuously

    Usage:
        # Run once
        worker = OverdueAdvancerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = OverdueAdvancerWorker()
        await worker.run_forever(interval_seconds=3600)  # Hourly
    """

    def __init__(self, store: Optional[InvoiceStore] = None):
        """
        Initialize the worker

        Args:
            store: Invoice store (defaults to the one configured by ApplicationConfig)
        """
        self.store = store or get_invoice_store()
        logger.info("OverdueAdvancerWorker initialized")

    async def run_once(self) -> AdvanceOverdueResultDTO:
        """
        Run overdue advancement once

        Returns:
            AdvanceOverdueResultDTO with the advanced invoice numbers
        """
        if not getattr(ApplicationConfig, "OVERDUE_ADVANCE_ENABLED", True):
            logger.info("Overdue advancement is disabled, skipping")
            return AdvanceOverdueResultDTO(
                invoices_checked=0,
                invoices_advanced=0,
                advanced_invoice_ids=[],
                run_time=utcnow(),
                execution_time_ms=0,
            )

        # Store I/O is blocking; run it off the event loop
        result = await asyncio.to_thread(self.store.advance_overdue_invoices)

        if result.invoices_advanced > 0:
            logger.warning(
                f"{result.invoices_advanced} invoice(s) became overdue: "
                f"{', '.join(result.advanced_invoice_ids)}"
            )

        return result

    async def run_forever(self, interval_seconds: Optional[int] = None):
        """
        Run overdue advancement continuously at the given interval

        Args:
            interval_seconds: Seconds between runs (default: OVERDUE_ADVANCE_INTERVAL_SECONDS)
        """
        interval_seconds = interval_seconds or ApplicationConfig.OVERDUE_ADVANCE_INTERVAL_SECONDS
        logger.info(
            f"Starting continuous overdue advancement with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Overdue cycle complete. "
                    f"Checked {result.invoices_checked} invoices, "
                    f"advanced {result.invoices_advanced} "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Overdue cycle failed: {e}")

            await asyncio.sleep(interval_seconds)


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.overdue_advancer

        # Run continuously
        python -m src.worker.overdue_advancer --continuous --interval 600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Overdue Advancement Worker")
    parser.add_argument(
        "--continuous", action="store_true", help="Run continuously"
    )
    parser.add_argument("--interval", type=int, help="Seconds between runs")
    args = parser.parse_args()

    worker = OverdueAdvancerWorker()

    try:
        if args.continuous:
            await worker.run_forever(interval_seconds=args.interval)
        else:
            result = await worker.run_once()
            print(f"Overdue advancement complete:")
            print(f"  Invoices checked: {result.invoices_checked}")
            print(f"  Invoices advanced: {result.invoices_advanced}")
            print(f"  Execution time: {result.execution_time_ms}ms")
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")


if __name__ == "__main__":
    asyncio.run(main())
