from abc import ABC, abstractmethod


class TransactionStore(ABC):
    @abstractmethod
    def connect(self):
        """Open the connection to the data store."""
        pass

    @abstractmethod
    def begin(self):
        pass

    @abstractmethod
    def commit(self):
        pass

    @abstractmethod
    def rollback(self):
        pass

    @abstractmethod
    def disconnect(self):
        """Close the connection. Must be safe to call after commit()."""
        pass
