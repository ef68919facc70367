"""Entry point for the thumbnail worker.
Prepares storage, then consumes thumbnail jobs until signalled to stop.
"""

import asyncio
import signal
import sys

from common.logging_config import setup_logging
from controller.database import init_database
from controller.object_store import LocalObjectStore
from worker.derivative_worker import DerivativeWorker

logger = setup_logging('worker')
# queue and repository modules log under the controller logger
setup_logging('controller')


async def serve(worker: DerivativeWorker) -> None:
    """
    Run the consumer loop with graceful shutdown on SIGINT/SIGTERM.

    Args:
        worker: Initialized DerivativeWorker instance
    """
    stop_event = asyncio.Event()

    def shutdown(sig=None):
        if sig:
            logger.info(f"Received signal {sig}, finishing current job...")
        stop_event.set()

    if sys.platform != 'win32':
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: shutdown(s))

    await worker.run(stop_event)
    logger.info("Worker stopped")


def main() -> None:
    """Bootstrap the thumbnail worker."""
    logger.info("Initializing thumbnail worker...")

    init_database()
    LocalObjectStore().ensure_directory()

    worker = DerivativeWorker()

    try:
        asyncio.run(serve(worker))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, worker shutdown complete")
    except Exception as e:
        logger.error(f"Worker error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
