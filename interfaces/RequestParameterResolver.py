from abc import ABC, abstractmethod


class RequestParameterResolver(ABC):
    @abstractmethod
    def resolve(self):
        """Returns the request parameters in canonical form (RequestParameters)."""
        pass
