"""Main application - runs the import queue in batches until it is drained."""
import signal
import sys
import time

from src.logging_conf import logger
from src import settings
from src.db import Database
from src.bigcommerce_client import BigCommerceClient
from src.product_importer import ProductImporter, ProductRemover
from src.queue.store import QueueStore
from src.queue_runner import QueueRunner
from src.status import DrainStatus, StatusTracker


class Application:
    """Schedules queue runner batches."""

    def __init__(self):
        self.db = Database()
        self.store = QueueStore(self.db)
        self.status = StatusTracker()
        self.runner = QueueRunner(
            store=self.store,
            status=self.status,
            importer=ProductImporter(self.db, BigCommerceClient()),
            remover=ProductRemover(self.db),
        )
        self.running = False

    def start(self):
        """Start the application."""
        logger.info("=" * 50)
        logger.info("Catalog Import Queue Runner")
        logger.info("=" * 50)
        logger.info(f"Queue table: {settings.QUEUE_TABLE}")
        logger.info(f"Batch size: {settings.QUEUE_BATCH_SIZE}, max attempts: {settings.QUEUE_MAX_ATTEMPTS}")
        logger.info(f"Poll interval: {settings.POLL_INTERVAL}s")
        logger.info("=" * 50)

        settings.validate_config()
        self.running = True
        logger.info("Started - draining import queue")

    def stop(self):
        """Stop the application."""
        if not self.running:
            return
        self.running = False
        self.db.close()
        logger.info("Stopped")

    def run_once(self):
        """Run a single batch, for cron-style invocation."""
        self.start()
        try:
            self.runner.run_batch()
        finally:
            self.stop()

    def run(self):
        """Main loop."""
        self.start()

        while self.running:
            try:
                self.runner.run_batch()

                # Keep going while there is work, otherwise wait for new items
                draining = self.status.get_status() == DrainStatus.DRAINING
                if draining and settings.get_channel_id():
                    time.sleep(settings.BATCH_INTERVAL)
                else:
                    time.sleep(settings.POLL_INTERVAL)

            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Error in main loop: {e}", exc_info=True)
                time.sleep(5)

        self.stop()


def main():
    """Entry point."""
    app = Application()

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if settings.RUN_ONCE:
            app.run_once()
        else:
            app.run()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
