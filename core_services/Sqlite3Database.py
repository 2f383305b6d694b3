import sqlite3
from typing import Any

from pagecycle.Exceptions import DataAccessException
from pagecycle.core_services.Database import Database


class Sqlite3Database(Database):
    """
    Transaction store on top of sqlite3. The connection runs in autocommit mode and the
    transaction is managed with explicit BEGIN/COMMIT/ROLLBACK statements.
    """
    connection: sqlite3.Connection = None
    connection_string: str = ":memory:"

    def connect(self):
        if self.connection is None:
            self.connection = sqlite3.connect(self.connection_string, isolation_level=None)
        return self.connection

    def begin(self):
        self._statement("BEGIN")

    def commit(self):
        self._statement("COMMIT")

    def rollback(self):
        if self.connection is not None and self.connection.in_transaction:
            self._statement("ROLLBACK")

    def disconnect(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    def _statement(self, sql: str):
        if self.connection is None:
            raise DataAccessException(f"Cannot {sql} without a connection")
        self.connection.execute(sql)

    def execute(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        try:
            cursor = self.connection.execute(sql, params)
        except sqlite3.Error as e:
            raise DataAccessException(str(e)) from e
        if cursor.description is None:
            return []
        columns = [column[0] for column in cursor.description]  # Get column names
        return [dict(zip(columns, row)) for row in cursor.fetchall()]
