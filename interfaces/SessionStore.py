from abc import ABC, abstractmethod
from typing import Optional


class SessionStore(ABC):
    @abstractmethod
    def start(self):
        """Start a new session or resume the session of the user agent."""
        pass

    @abstractmethod
    def save(self):
        pass

    @abstractmethod
    def is_anonymous(self) -> bool:
        pass

    @property
    @abstractmethod
    def cmp_id(self) -> int:
        """ID of the company (tenant) of the session."""
        pass

    @property
    @abstractmethod
    def pro_id(self) -> Optional[int]:
        """ID of the profile (program context) of the user."""
        pass

    @property
    @abstractmethod
    def lan_id(self) -> Optional[int]:
        """ID of the preferred language of the user."""
        pass
