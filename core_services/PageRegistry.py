from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from pagecycle.interfaces.AuthorizationResolver import AuthorizationResolver, PageDescriptor
from pagecycle.interfaces.Page import Page, PageFactory


@dataclass
class PageRecord:
    pag_id: int
    pag_class: str
    factory: Callable
    alias: Optional[str] = None
    titles: dict = field(default_factory=dict)
    # None means everybody, anonymous user agents included.
    programs: Optional[frozenset] = None
    # None means all companies.
    companies: Optional[frozenset] = None

    def title(self, lan_id: Optional[int]) -> str:
        if lan_id in self.titles:
            return self.titles[lan_id]
        return next(iter(self.titles.values()), "")

    def is_authorized(self, pro_id: Optional[int]) -> bool:
        if self.programs is None:
            return True
        return pro_id is not None and pro_id in self.programs


class PageRegistry(PageFactory):
    """
    The table of pages of the application: page ID ➜ factory, populated at startup.

    Example:
        registry = PageRegistry()

        @registry.page(1, alias="home", title="Home")
        class HomePage(Page):
            def handle_request(self):
                return self.render("home.html")
    """

    def __init__(self):
        self._pages: dict[int, PageRecord] = {}
        self._aliases: dict[str, int] = {}

    def __contains__(self, pag_id):
        return pag_id in self._pages

    def __iter__(self):
        return iter(sorted(self._pages.values(), key=lambda record: record.pag_id))

    def __len__(self):
        return len(self._pages)

    def register(self, pag_id: int, factory: Callable, alias: str = None, title=None,
                 programs: Iterable[int] = None, companies: Iterable[int] = None, pag_class: str = None) -> PageRecord:
        """
        Args:
            pag_id: The ID of the page.
            factory: Called with the lifecycle context, returns the page object.
            alias: Optional alias of the page, unique over all pages.
            title: The title of the page, or a dict of titles by language ID.
            programs: IDs of the profiles granted access. None makes the page public.
            companies: IDs of the companies the page exists for. None means all companies.
            pag_class: The key of the page's implementation, defaults to the qualified name of the factory.
        """
        if pag_id in self._pages:
            raise ValueError(f"Page {pag_id} is already registered as {self._pages[pag_id].pag_class}")
        if alias is not None and alias in self._aliases:
            raise ValueError(f"Alias '{alias}' is already used by page {self._aliases[alias]}")

        if isinstance(title, dict):
            titles = dict(title)
        else:
            titles = {None: title} if title else {}

        record = PageRecord(
            pag_id=pag_id,
            pag_class=pag_class or f"{factory.__module__}.{factory.__qualname__}",
            factory=factory,
            alias=alias,
            titles=titles,
            programs=frozenset(programs) if programs is not None else None,
            companies=frozenset(companies) if companies is not None else None,
        )
        self._pages[pag_id] = record
        if alias is not None:
            self._aliases[alias] = pag_id
        return record

    def page(self, pag_id: int, **options):
        """Class decorator registering a Page subclass."""

        def decorator(cls):
            self.register(pag_id, cls, **options)
            return cls

        return decorator

    def find(self, cmp_id: int = None, pag_id: int = None, pag_alias: str = None) -> Optional[PageRecord]:
        if pag_id is None and pag_alias is not None:
            pag_id = self._aliases.get(pag_alias)

        record = self._pages.get(pag_id)
        if record is None:
            return None
        if record.companies is not None and cmp_id not in record.companies:
            return None
        return record

    def create(self, descriptor: PageDescriptor, context) -> Page:
        record = self._pages.get(descriptor.pag_id)
        if record is None or record.pag_class != descriptor.pag_class:
            raise LookupError(f"No page registered as {descriptor.pag_class}")
        return record.factory(context)


class RegistryAuthorizationResolver(AuthorizationResolver):
    def __init__(self, registry: PageRegistry):
        self.registry = registry

    def get_page_info(self, cmp_id, pag_id, pro_id, lan_id, pag_alias) -> Optional[PageDescriptor]:
        record = self.registry.find(cmp_id, pag_id, pag_alias)
        if record is None:
            return None

        return PageDescriptor(
            pag_id=record.pag_id,
            pag_class=record.pag_class,
            title=record.title(lan_id),
            authorized=record.is_authorized(pro_id),
            alias=record.alias,
        )
