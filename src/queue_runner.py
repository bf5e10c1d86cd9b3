"""Drains the catalog import queue in bounded batches."""
import threading
import time
from typing import Callable

from src import settings
from src.catalog_models import Listing, PayloadError, Product
from src.logging_conf import NOTICE, logger
from src.queue.models import ImportAction, QueueItem
from src.status import DrainStatus


class QueueRunner:
    """Processes one batch of the import queue per call to ``run_batch``.

    Meant to be invoked repeatedly by a scheduler until the status tracker
    reports ``DrainStatus.DRAINED``. Nothing is raised out of ``run_batch``;
    progress is visible only through the log and the queue itself.
    """

    def __init__(
        self,
        store,
        status,
        importer,
        remover,
        batch_size: int = None,
        max_attempts: int = None,
        channel_id_provider: Callable[[], str] = None,
        item_time_warning: float = None,
    ):
        self.store = store
        self.status = status
        self.importer = importer
        self.remover = remover
        self.batch_size = int(batch_size if batch_size is not None else settings.QUEUE_BATCH_SIZE)
        self.max_attempts = int(max_attempts if max_attempts is not None else settings.QUEUE_MAX_ATTEMPTS)
        self.channel_id_provider = channel_id_provider or settings.get_channel_id
        if item_time_warning is None:
            item_time_warning = settings.ITEM_TIME_WARNING_SECONDS
        self.item_time_warning = item_time_warning
        self._lock = threading.Lock()

    def run_batch(self) -> None:
        """Claim and process up to ``batch_size`` items, then update the drain status."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Queue run already in progress, skipping")
            return
        try:
            self._run_batch()
        except Exception as e:
            logger.error(f"Queue run failed: {e}", exc_info=True)
        finally:
            self._lock.release()

    def _run_batch(self) -> None:
        channel_id = self.channel_id_provider()
        if not channel_id:
            logger.error("Channel ID is not set. Product import canceled.")
            return

        with self.store.run_lock() as acquired:
            if not acquired:
                logger.info("Import queue is being processed by another runner, skipping")
                return
            self.store.release_abandoned_claims()
            self._drain(channel_id)

    def _drain(self, channel_id: str) -> None:
        self.status.set_status(DrainStatus.DRAINING)

        items = self.store.claim_batch(self.batch_size)
        for item in items:
            started = time.monotonic()
            try:
                self._handle(item, channel_id)
            except Exception as e:
                # The claim expires on its own; the item is picked up again later
                logger.error(
                    f"Failed to handle product {item.id}: {e}",
                    exc_info=True,
                    extra={"product_id": item.id, "attempt": item.attempts}
                )
            elapsed = time.monotonic() - started
            if elapsed > self.item_time_warning:
                logger.warning(
                    f"Product {item.id} took {elapsed:.1f}s to handle",
                    extra={"product_id": item.id, "action": item.raw_action}
                )

        remaining = self.store.count()
        logger.info(
            f"Completed import batch: {len(items)} processed, {remaining} remaining",
            extra={"count": len(items), "remaining": remaining}
        )
        if remaining < 1:
            self.status.set_status(DrainStatus.DRAINED)

    def _handle(self, item: QueueItem, channel_id: str) -> None:
        logger.debug(
            "Handling product from import queue",
            extra={"product_id": item.id, "attempt": item.attempts, "action": item.raw_action}
        )

        action = item.action
        if action in (ImportAction.UPDATE, ImportAction.IGNORE):
            self._import(item, channel_id)
        elif action == ImportAction.DELETE:
            self._remove(item)
        else:
            logger.log(
                NOTICE,
                f"Unexpected import action '{item.raw_action}', removing from queue",
                extra={"product_id": item.id, "action": item.raw_action}
            )
            self.store.delete(item.id)

    def _import(self, item: QueueItem, channel_id: str) -> None:
        try:
            product = Product.from_json(item.product_data)
            listing = Listing.from_json(item.listing_data)
        except PayloadError as e:
            logger.warning(
                f"Unable to parse product data, removing from queue: {e}",
                extra={"product_id": item.id}
            )
            self.store.delete(item.id)
            return

        try:
            imported_id = self.importer.import_product(product, listing, channel_id)
        except Exception as e:
            logger.error(f"Import of product {item.id} raised: {e}", exc_info=True, extra={"product_id": item.id})
            imported_id = None

        if imported_id:
            logger.debug(
                "Product imported successfully",
                extra={"product_id": item.id, "action": item.raw_action}
            )
            self.store.delete(item.id)
        elif item.attempts > self.max_attempts:
            logger.warning(
                f"Too many failed attempts ({item.attempts}), removing from queue",
                extra={"product_id": item.id, "action": item.raw_action}
            )
            self.store.delete(item.id)
        else:
            logger.info(
                f"Import of product {item.id} failed, will retry (attempt {item.attempts}/{self.max_attempts})",
                extra={"product_id": item.id, "attempt": item.attempts}
            )
            self.store.release(item.id)

    def _remove(self, item: QueueItem) -> None:
        try:
            self.remover.remove(item.id)
        except Exception as e:
            logger.error(f"Removal of product {item.id} raised: {e}", exc_info=True, extra={"product_id": item.id})
        finally:
            self.store.delete(item.id)
