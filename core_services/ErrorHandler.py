import logging
from contextlib import contextmanager


class ErrorHandler:
    def __init__(self, name="pagecycle.errors", log_to_console=True, log_to_file=None, log_level=logging.INFO):
        """
        :param name: logger name
        :param log_to_console: whether to log to the terminal
        :param log_to_file: filepath string to enable file logging
        :param log_level: level of the logger
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if log_to_console and not self._has_handler(logging.StreamHandler):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_to_file and not self._has_handler(logging.FileHandler, log_to_file):
            file_handler = logging.FileHandler(log_to_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def _has_handler(self, handler_type, filename=None):
        for handler in self.logger.handlers:
            if handler_type is logging.StreamHandler and isinstance(handler, logging.FileHandler):
                # FileHandler is a StreamHandler too
                continue
            if isinstance(handler, handler_type):
                if isinstance(handler, logging.FileHandler):
                    return handler.baseFilename == filename
                return True
        return False

    def record(self, exception: BaseException, message: str = "Unhandled exception"):
        """Writes the exception with its traceback to the error log."""
        self.logger.error(f"{message} | {type(exception).__name__}: {exception}", exc_info=exception)

    @contextmanager
    def handle_errors(self, exception_map, fallback=None, log_level=logging.ERROR):
        """
        Logs and suppresses the exceptions in exception_map.

        Example:
            with error_handler.handle_errors({sqlite3.Error: "Rollback failed"}):
                database.rollback()
        """
        try:
            yield
        except tuple(exception_map.keys()) as e:
            message = next(
                (text for exc_type, text in exception_map.items() if isinstance(e, exc_type)),
                "An error occurred."
            )
            self.logger.log(log_level, f"{message} | Exception: {type(e).__name__}: {e}")
            if fallback:
                fallback(message, e)
