"""Database connection handling."""
import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager

from src import settings


class Database:
    """Lazily opened PostgreSQL connection shared by the queue store and handlers."""

    def __init__(self, dsn: str = None):
        self.dsn = dsn or settings.DATABASE_URL
        self._conn = None

    @property
    def conn(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.dsn)
        return self._conn

    def close(self):
        """Close database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()
            self._conn = None

    @contextmanager
    def cursor(self):
        """Context manager for cursor with auto-commit/rollback."""
        cur = self.conn.cursor(cursor_factory=RealDictCursor)
        try:
            yield cur
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cur.close()
