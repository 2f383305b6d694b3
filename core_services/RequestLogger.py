import logging
import pprint
import time


class RequestLogger:
    def __init__(self, method: str = None, path: str = None, name: str = "pagecycle.request"):
        self.method = method
        self.path = path
        self.logger = logging.getLogger(name)
        self.started_at = time.perf_counter()

    def log_request(self, status: int):
        log_entry = {
            "event": "request",
            "method": self.method,
            "path": self.path,
            "status": status,
            "duration": round(time.perf_counter() - self.started_at, 4),
        }
        self.logger.info(pprint.pformat(log_entry, compact=True))
