from unittest import TestCase

from fakes import FakePage, make_context
from pagecycle.core_services.PageRegistry import PageRegistry, RegistryAuthorizationResolver
from pagecycle.interfaces.AuthorizationResolver import PageDescriptor
from pagecycle.interfaces.Page import Page


class TestPageRegistry(TestCase):
    def setUp(self):
        self.registry = PageRegistry()

        @self.registry.page(1, alias="home", title={1: "Home", 2: "Accueil"})
        class HomePage(Page):
            def handle_request(self):
                return "home"

        @self.registry.page(2, alias="reports", title="Reports", programs=[10, 11], companies=[1])
        class ReportsPage(Page):
            def handle_request(self):
                return "reports"

        self.home_class = HomePage
        self.resolver = RegistryAuthorizationResolver(self.registry)

    def test_decorator_registers_and_returns_the_class(self):
        assert 1 in self.registry
        assert len(self.registry) == 2
        assert self.registry.find(pag_id=1).factory is self.home_class
        assert [record.pag_id for record in self.registry] == [1, 2]

    def test_lookup_by_alias(self):
        assert self.registry.find(cmp_id=1, pag_alias="reports").pag_id == 2
        assert self.registry.find(cmp_id=1, pag_alias="missing") is None

    def test_duplicate_id_or_alias_is_refused(self):
        with self.assertRaises(ValueError):
            self.registry.register(1, FakePage)
        with self.assertRaises(ValueError):
            self.registry.register(3, FakePage, alias="home")

    def test_public_page_is_authorized_for_anonymous(self):
        info = self.resolver.get_page_info(1, 1, None, 1, None)

        assert info == PageDescriptor(pag_id=1, pag_class=info.pag_class, title="Home", authorized=True, alias="home")

    def test_title_in_language_with_fallback(self):
        assert self.resolver.get_page_info(1, 1, None, 2, None).title == "Accueil"
        assert self.resolver.get_page_info(1, 1, None, 9, None).title == "Home"

    def test_restricted_page(self):
        assert self.resolver.get_page_info(1, 2, None, 1, None).authorized is False
        assert self.resolver.get_page_info(1, 2, 12, 1, None).authorized is False
        assert self.resolver.get_page_info(1, 2, 11, 1, None).authorized is True

    def test_page_of_other_company_does_not_exist(self):
        assert self.resolver.get_page_info(2, 2, 11, 1, None) is None
        assert self.resolver.get_page_info(2, 1, None, 1, None) is not None

    def test_create_instantiates_the_registered_page(self):
        context = make_context()
        info = self.resolver.get_page_info(1, 1, None, 1, None)

        page = self.registry.create(info, context)

        assert isinstance(page, self.home_class)
        assert page.context is context

    def test_create_refuses_stale_descriptor(self):
        stale = PageDescriptor(pag_id=1, pag_class="somewhere.OldHomePage", authorized=True)

        with self.assertRaises(LookupError):
            self.registry.create(stale, make_context())
