"""PostgreSQL-backed import queue."""
from contextlib import contextmanager
from typing import List

from psycopg2 import sql

from src import settings
from src.db import Database
from src.logging_conf import logger
from src.queue.models import QueueItem


class QueueStore:
    """The import queue table, read and mutated by the queue runner.

    Runs are serialized across processes by a session-level advisory lock
    keyed on the table name. PostgreSQL drops the lock when the holder's
    connection goes away, so a crashed runner never blocks the queue and a
    live one is never overtaken, however long its handlers take.

    Items are claimed rather than merely selected: the claim increments the
    attempt counter and stamps ``claimed_at`` in the same statement. A claim
    found while holding the run lock belongs to a runner that died mid-batch.
    """

    def __init__(self, db: Database, table: str = None):
        self.db = db
        self.table_name = table or settings.QUEUE_TABLE
        self.table = sql.Identifier(self.table_name)

    @contextmanager
    def run_lock(self):
        """Try to become the only runner of this queue; yields whether it worked."""
        with self.db.cursor() as cur:
            cur.execute("SELECT pg_try_advisory_lock(hashtext(%s)) AS locked", (self.table_name,))
            row = cur.fetchone()
        acquired = bool(row and row["locked"])
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    with self.db.cursor() as cur:
                        cur.execute("SELECT pg_advisory_unlock(hashtext(%s))", (self.table_name,))
                except Exception as e:
                    # Released by the server when the session ends
                    logger.warning(f"Failed to release queue run lock: {e}")

    def claim_batch(self, limit: int) -> List[QueueItem]:
        """Claim up to ``limit`` items, counting one attempt against each."""
        query = sql.SQL("""
            WITH picked AS (
                SELECT bc_id
                FROM {table}
                WHERE claimed_at IS NULL
                ORDER BY attempts ASC, priority DESC, date_created ASC, date_modified ASC
                LIMIT %s
                FOR UPDATE SKIP LOCKED
            )
            UPDATE {table} AS q
            SET attempts = q.attempts + 1,
                last_attempt = NOW(),
                claimed_at = NOW()
            FROM picked
            WHERE q.bc_id = picked.bc_id
            RETURNING q.*
        """).format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query, (limit,))
            rows = cur.fetchall()

        # RETURNING does not preserve the ORDER BY of the CTE
        items = sorted((QueueItem.from_row(row) for row in rows), key=lambda item: item.sort_key)
        logger.debug(f"Claimed {len(items)} queue items", extra={"count": len(items)})
        return items

    def release(self, product_id: str) -> None:
        """Clear the claim on an item that stays queued for a later batch."""
        query = sql.SQL("UPDATE {table} SET claimed_at = NULL WHERE bc_id = %s").format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query, (product_id,))

    def delete(self, product_id: str) -> None:
        """Remove an item that reached a terminal outcome."""
        query = sql.SQL("DELETE FROM {table} WHERE bc_id = %s").format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query, (product_id,))

    def count(self) -> int:
        """Number of items left in the queue, claimed or not."""
        query = sql.SQL("SELECT COUNT(*) AS remaining FROM {table}").format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query)
            row = cur.fetchone()
        return int(row["remaining"]) if row else 0

    def release_abandoned_claims(self) -> int:
        """Release claims left behind by a runner that died mid-batch.

        Only safe while holding ``run_lock``.
        """
        query = sql.SQL("""
            UPDATE {table}
            SET claimed_at = NULL
            WHERE claimed_at IS NOT NULL
            RETURNING bc_id
        """).format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query)
            count = len(cur.fetchall())
        if count > 0:
            logger.warning(f"Released {count} abandoned queue claims")
        return count
