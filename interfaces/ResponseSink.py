from abc import ABC, abstractmethod


class ResponseSink(ABC):
    @abstractmethod
    def send(self, response) -> None:
        """Transmit the response to the user agent."""
        pass
