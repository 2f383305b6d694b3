from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True)
class PageDescriptor:
    pag_id: int
    pag_class: Hashable
    title: str = ""
    authorized: bool = False
    alias: Optional[str] = None


class AuthorizationResolver(ABC):
    @abstractmethod
    def get_page_info(self, cmp_id: int, pag_id: Optional[int], pro_id: Optional[int], lan_id: Optional[int],
                      pag_alias: Optional[str]) -> Optional[PageDescriptor]:
        """
        Returns the metadata of the requested page, or None if no such page exists.
        Exactly one of pag_id and pag_alias is used to look up the page.
        """
        pass
