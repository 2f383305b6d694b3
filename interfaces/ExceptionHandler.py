from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FailureContext:
    request_uri: Optional[str] = None
    is_anonymous: bool = True


class ExceptionHandler(ABC):
    """
    Translates exceptions into responses. Implementations must never raise.
    """

    @abstractmethod
    def handle_prepare_exception(self, exception: Exception, context: FailureContext):
        pass

    @abstractmethod
    def handle_construct_exception(self, exception: Exception, context: FailureContext):
        pass

    @abstractmethod
    def handle_response_exception(self, exception: Exception, context: FailureContext):
        pass

    @abstractmethod
    def handle_finalize_exception(self, exception: Exception, context: FailureContext):
        pass
