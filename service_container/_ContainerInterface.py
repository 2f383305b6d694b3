from abc import ABC, abstractmethod


class ContainerInterface(ABC):
    @abstractmethod
    def get(self, id):
        """Find and return the entry for the given id. Raises ServiceNotFound when there is none."""
        pass

    @abstractmethod
    def has(self, id) -> bool:
        """Return True if the container contains an entry for the given id."""
        pass


class ServiceNotFound(LookupError):
    def __init__(self, id):
        super().__init__(f"Service '{id}' is not registered in the container")
        self.id = id
