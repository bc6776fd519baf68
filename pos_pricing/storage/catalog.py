"""SQLite read models for presentations and promotions, and sale persistence."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging
import sqlite3

from ..core.exceptions import RecordParseError
from ..core.models import Channel, Presentation, Promotion, SaleRecord
from .records import presentation_from_row, promotion_from_row

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS presentations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        price_local INTEGER NOT NULL,
        price_delivery INTEGER NOT NULL
    );

    CREATE TABLE IF NOT EXISTS promotions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        presentation_id INTEGER NOT NULL,
        min_quantity INTEGER DEFAULT 1,
        discount_type TEXT NOT NULL,
        discount_value INTEGER NOT NULL,
        active_days TEXT,
        start_date TEXT,
        end_date TEXT,
        channel TEXT DEFAULT 'all',
        is_active INTEGER DEFAULT 1,
        FOREIGN KEY(presentation_id) REFERENCES presentations(id) ON DELETE CASCADE
    );

    CREATE TABLE IF NOT EXISTS sales (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        type TEXT NOT NULL,
        presentation_name TEXT NOT NULL,
        price_base INTEGER NOT NULL,
        quantity INTEGER NOT NULL,
        total INTEGER NOT NULL,
        date TEXT NOT NULL,
        payment_method TEXT DEFAULT 'efectivo'
    );

    CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);
"""


class SQLiteCatalog:
    """Storage collaborator of the pricing engine backed by a local SQLite file"""

    def __init__(self, db_path: Union[str, Path] = "pos.db", initialize: bool = True):
        self.db_path = Path(db_path)
        if initialize:
            self._init_database()

    def get_presentations(self) -> List[Presentation]:
        rows = self._fetch_all("SELECT * FROM presentations ORDER BY id DESC")
        return [presentation_from_row(row) for row in rows]

    def get_presentation(self, presentation_id: int) -> Optional[Presentation]:
        rows = self._fetch_all("SELECT * FROM presentations WHERE id = ?", (presentation_id,))
        return presentation_from_row(rows[0]) if rows else None

    def get_promotions(self, skip_invalid: bool = True) -> List[Promotion]:
        """Load every promotion, newest first.

        Rows that cannot be parsed are logged and skipped unless skip_invalid
        is False, in which case the RecordParseError propagates.
        """
        rows = self._fetch_all("SELECT * FROM promotions ORDER BY id DESC")

        promotions = []
        for row in rows:
            try:
                promotions.append(promotion_from_row(row))
            except RecordParseError as e:
                if not skip_invalid:
                    raise
                logger.warning(f"Skipping promotion row: {e}")

        logger.debug(f"Loaded {len(promotions)} of {len(rows)} promotions from {self.db_path}")
        return promotions

    def add_sale(self, record: SaleRecord) -> SaleRecord:
        """Persist a sale record and return it with its assigned id"""
        row = record.to_row()

        conn = self._connect()
        try:
            cursor = conn.execute("""
                INSERT INTO sales (type, presentation_name, price_base, quantity, total, date, payment_method)
                VALUES (:type, :presentation_name, :price_base, :quantity, :total, :date, :payment_method)
            """, row)
            conn.commit()
            record.id = cursor.lastrowid
        finally:
            conn.close()

        logger.info(f"Stored sale {record.id}: {record.quantity} x {record.presentation_name}")
        return record

    def get_sales(self,
                  channel: Optional[Union[Channel, str]] = None,
                  start: Optional[datetime] = None,
                  end: Optional[datetime] = None,
                  page: Optional[int] = None,
                  page_size: int = 10) -> List[Dict[str, Any]]:
        """Sales rows filtered by channel and [start, end] timestamp, newest first.

        When page is given (1-based) only that page of page_size rows is returned.
        """
        query = "SELECT * FROM sales"
        conditions = []
        params: List[Any] = []

        if start:
            conditions.append("date >= ?")
            params.append(start.isoformat())
        if end:
            conditions.append("date <= ?")
            params.append(end.isoformat())

        channel_value = channel.value if isinstance(channel, Channel) else channel
        if channel_value and channel_value != Channel.ALL.value:
            conditions.append("type = ?")
            params.append(channel_value)

        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY date DESC, id DESC"

        if page is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([page_size, (max(page, 1) - 1) * page_size])

        return self._fetch_all(query, params)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _fetch_all(self, query: str, params: Any = ()) -> List[Dict[str, Any]]:
        conn = self._connect()
        try:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def _init_database(self):
        """Create the tables if they do not exist yet"""
        conn = self._connect()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()
