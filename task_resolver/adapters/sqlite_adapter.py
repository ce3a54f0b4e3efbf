import sqlite3
from collections.abc import Iterable, Sequence
from contextlib import closing

from task_resolver.resolution.exceptions import ExternalResourceError


class SqliteAdapter:
    """Runs a query against a throwaway in-memory SQLite database."""

    def execute(
        self,
        schema_ddl: str,
        seed_sql: str,
        seed_rows: Iterable[Sequence[object]],
        query: str,
        params: Sequence[object] = (),
    ) -> object:
        """Create the schema, insert seed rows and return the first column of the first row."""
        try:
            with closing(sqlite3.connect(":memory:")) as conn:
                conn.executescript(schema_ddl)
                conn.executemany(seed_sql, seed_rows)
                row = conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            raise ExternalResourceError(f"database query failed: {exc}") from exc
        return None if row is None else row[0]
