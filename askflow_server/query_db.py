"""SQLite storage for saved prompt/response queries."""

import os
import sqlite3
from pathlib import Path

from askflow.models.saved_query import SavedQuery

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "askflow.db"
QUERY_DB_PATH = Path(os.getenv("ASKFLOW_DB_PATH", str(DEFAULT_DB_PATH)))

MAX_LIST_LIMIT = 100


def _connect() -> sqlite3.Connection:
    QUERY_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(QUERY_DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    with _connect() as conn:
        conn.execute(
            """
            create table if not exists queries (
                query_id text primary key,
                query_json text not null,
                timestamp text not null
            )
            """
        )
        conn.execute(
            """
            create index if not exists idx_queries_timestamp
            on queries(timestamp)
            """
        )
        conn.commit()


def insert_query(query: SavedQuery) -> None:
    with _connect() as conn:
        conn.execute(
            """
            insert into queries (query_id, query_json, timestamp)
            values (?, ?, ?)
            """,
            (query.id, query.model_dump_json(), query.timestamp),
        )
        conn.commit()


def list_queries(limit: int = MAX_LIST_LIMIT) -> list[SavedQuery]:
    """Newest first, never more than MAX_LIST_LIMIT rows."""
    limit = max(0, min(limit, MAX_LIST_LIMIT))
    with _connect() as conn:
        rows = conn.execute(
            """
            select query_json
            from queries
            order by timestamp desc, rowid desc
            limit ?
            """,
            (limit,),
        ).fetchall()
    return [SavedQuery.model_validate_json(row["query_json"]) for row in rows]


def get_query(query_id: str) -> SavedQuery | None:
    with _connect() as conn:
        row = conn.execute(
            "select query_json from queries where query_id = ?",
            (query_id,),
        ).fetchone()
    if not row:
        return None
    return SavedQuery.model_validate_json(row["query_json"])


def delete_query(query_id: str) -> bool:
    """Delete a query; False if no row had that id."""
    with _connect() as conn:
        cursor = conn.execute("delete from queries where query_id = ?", (query_id,))
        conn.commit()
    return cursor.rowcount > 0
