# pincorp/data_access/database_manager.py

import json
import os
import sqlite3
import logging
from typing import Any, List, Type, TypeVar

from pincorp.config import DATABASE_PATH
from pincorp.data_access.serialization import entity_from_dict, entity_to_dict

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DatabaseManager:
    """
    sqlite3 snapshot storage used by the application shell.

    Every collection of the DataStore is written as JSON rows. The shell
    subscribes save_changes to the store, so each committed transaction
    writes only the rows it touched, and loads each collection back at start-up.
    """

    def __init__(self, db_path=DATABASE_PATH):
        self.db_path = db_path
        self.conn = None

    def __enter__(self):
        try:
            directory = os.path.dirname(self.db_path)
            if directory and not os.path.exists(directory):
                os.makedirs(directory)
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row # Access columns by name
            logger.debug(f"Database connection established to {self.db_path}")
            return self.conn
        except sqlite3.Error as e:
            logger.error(f"Error connecting to database {self.db_path}: {e}")
            raise

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed.")

    def execute_query(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                conn.commit()
                return cursor
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query} with params {params} - {e}")
            raise

    def fetch_all(self, query, params=None):
        try:
            with self as conn:
                cursor = conn.cursor()
                cursor.execute(query, params or ())
                return cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Fetch all failed: {query} with params {params} - {e}")
            raise

    def create_tables(self):
        self.execute_query(
            """
            CREATE TABLE IF NOT EXISTS collection_rows (
                collection TEXT NOT NULL,
                row_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                payload TEXT NOT NULL, -- JSON document of one entity
                PRIMARY KEY (collection, row_id)
            );
            """
        )
        self.execute_query(
            "CREATE INDEX IF NOT EXISTS idx_collection_rows_position ON collection_rows (collection, position);"
        )
        logger.info("Database tables checked/created successfully.")

    def save_changes(self, collection: str, entities: List[Any], deleted_ids: List[str]) -> None:
        """Upserts the changed entities and removes the deleted ones. New rows go after the existing ones."""
        upserts = [(collection, entity.id, collection, json.dumps(entity_to_dict(entity), ensure_ascii=False))
                   for entity in entities]
        try:
            with self as conn:
                conn.executemany(
                    """
                    INSERT INTO collection_rows (collection, row_id, position, payload)
                    VALUES (?, ?, (SELECT COALESCE(MAX(position), -1) + 1 FROM collection_rows WHERE collection = ?), ?)
                    ON CONFLICT (collection, row_id) DO UPDATE SET payload = excluded.payload
                    """,
                    upserts)
                conn.executemany(
                    "DELETE FROM collection_rows WHERE collection = ? AND row_id = ?",
                    [(collection, row_id) for row_id in deleted_ids])
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Saving changes to collection '{collection}' failed: {e}")
            raise
        logger.debug(f"Collection '{collection}': {len(upserts)} row(s) saved, {len(deleted_ids)} deleted.")

    def load_collection(self, collection: str, model_type: Type[T]) -> List[T]:
        rows = self.fetch_all(
            "SELECT payload FROM collection_rows WHERE collection = ? ORDER BY position", (collection,))
        entities = [entity_from_dict(model_type, json.loads(row["payload"])) for row in rows]
        logger.debug(f"Collection '{collection}' loaded ({len(entities)} rows).")
        return entities
