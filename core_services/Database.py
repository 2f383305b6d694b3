import logging
import os
import pprint
import time

from pagecycle.Exceptions import DataAccessException
from pagecycle.interfaces.TransactionStore import TransactionStore


class NoResultsFound(DataAccessException):
    # Custom exception for no results found returns text "Query returned no results"
    def __init__(self, message="Query returned no results"):
        super().__init__(message)


class Database(TransactionStore):
    """
    Base class of the transaction stores. Subclasses implement connect(), execute() and the
    transaction statements; this class keeps track of the connection and logs the queries.
    """
    connection = None
    connection_string: str = ""

    def __init__(self, connection_string: str = None):
        if connection_string is not None:
            self.connection_string = connection_string
        self.logging_enabled = os.getenv("PAGECYCLE_SQL_DEBUG", 'false').lower() == "true"
        self.logger = logging.getLogger("pagecycle.sql")
        if not self.logger.handlers:  # prevent duplicate handlers
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s"
            ))
            self.logger.addHandler(handler)
        self.logger.setLevel(logging.DEBUG)

    def _log_query(self, sql: str, params: tuple, elapsed_ms: float):
        if self.logging_enabled:
            log_entry = {
                "event": "sql_query",
                "sql": sql,
                "params": params,
                "elapsed_ms": round(elapsed_ms, 2),
                "database": self.__class__.__name__,
            }
            self.logger.debug("\n" + pprint.pformat(log_entry, indent=2, width=80, compact=False) + "\n")

    class DotDict(dict):
        def __getattr__(self, key):
            return self.get(key)

        def __setattr__(self, key, value):
            self[key] = value

        def __delattr__(self, key):
            del self[key]

    @property
    def is_connected(self) -> bool:
        return self.connection is not None

    def execute(self, sql: str, params: tuple = ()) -> list[dict]:
        raise NotImplementedError

    def query(self, sql: str, params: tuple = ()) -> list[dict]:
        if not self.is_connected:
            raise DataAccessException("Not connected to the database")
        started = time.perf_counter()
        try:
            return self.execute(sql, params)
        finally:
            self._log_query(sql, params, (time.perf_counter() - started) * 1000)

    def results_or_fail(self, sql: str, params: tuple = (), fallback=None) -> list[DotDict]:
        results = self.query(sql, params)
        if not results:
            if fallback:
                return fallback()
            raise NoResultsFound()
        return [self.DotDict(result) for result in results]

    def row_or_fail(self, sql: str, params: tuple = ()) -> DotDict:
        return self.results_or_fail(sql, params)[0]
