import os
import tempfile
from unittest import TestCase, mock
from urllib.parse import parse_qs, urlsplit

from flask import Flask, Response, abort, url_for

from pagecycle import Event, LifecycleAware, Page, PageRegistry, Pagecycle, singleton
from pagecycle.Exceptions import NotPreferredUrlException


@singleton
class AuditTrail(LifecycleAware):
    events = []

    def on_end_response(self, lifecycle):
        AuditTrail.events.append((Event.END_RESPONSE, lifecycle.page_id))

    def on_end_finalize(self, lifecycle):
        AuditTrail.events.append((Event.END_FINALIZE, lifecycle.page_id))


def create_app(**options):
    registry = PageRegistry()

    @registry.page(1, alias="home", title="Home")
    class HomePage(Page):
        def handle_request(self):
            return Response(f"home in language {self.context.babel.lan_id}")

    @registry.page(2, alias="reports", title="Reports", programs=[7])
    class ReportsPage(Page):
        def handle_request(self):
            return Response("reports")

    @registry.page(3, alias="orders", title="Orders")
    class OrdersPage(Page):
        def handle_request(self):
            order_id = self.context.request_parameter_resolver.resolve().get_opt_id("order")
            if order_id is None:
                abort(404)
            row = self.context.transaction_store.row_or_fail("SELECT ? AS id", (order_id,))
            return Response(f"order {row.id}")

    @registry.page(4, alias="old-name", title="Moved")
    class MovedPage(Page):
        def get_preferred_uri(self):
            return "/new-name"

        def handle_request(self):
            raise AssertionError("must not render")

    @registry.page(5, alias="café", title="Café")
    class CafePage(Page):
        def get_preferred_uri(self):
            return url_for("pagecycle_page", path="café")

        def handle_request(self):
            return Response("menu")

    app = Flask(__name__)
    app.secret_key = "testing"
    app.config["TESTING"] = True

    @app.route("/login")
    def login():
        return "login form"

    with mock.patch.dict(os.environ, {"AUTH_IDENTITY_KEY": "user_id"}):
        Pagecycle(app, page_registry=registry, services={"AuditTrail": AuditTrail}, **options)
    return app


class TestPageRoute(TestCase):
    def setUp(self):
        AuditTrail.events = []
        self.app = create_app()
        self.client = self.app.test_client()

    def test_index_page(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "home in language 1"

    def test_page_by_alias_path(self):
        response = self.client.get("/orders?order=12")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "order 12"

    def test_page_by_id(self):
        response = self.client.get("/?pag=3&order=5")

        assert response.get_data(as_text=True) == "order 5"

    def test_page_abort_is_not_found(self):
        assert self.client.get("/orders").status_code == 404

    def test_unknown_page(self):
        assert self.client.get("/does-not-exist").status_code == 404

    def test_anonymous_user_is_sent_to_login(self):
        response = self.client.get("/reports?period=2024")

        assert response.status_code == 303
        location = urlsplit(response.headers["Location"])
        assert location.path == "/login"
        assert parse_qs(location.query) == {"redirect": ["/reports?period=2024"]}

    def test_login_route_of_the_app_wins(self):
        assert self.client.get("/login").get_data(as_text=True) == "login form"

    def test_user_with_access(self):
        with self.client.session_transaction() as session:
            session["user_id"] = "alice"
            session["pro_id"] = 7

        assert self.client.get("/reports").status_code == 200

    def test_user_without_access(self):
        with self.client.session_transaction() as session:
            session["user_id"] = "bob"
            session["pro_id"] = 8

        assert self.client.get("/reports").status_code == 404

    def test_not_preferred_url(self):
        response = self.client.get("/old-name")

        assert response.status_code == 301
        assert urlsplit(response.headers["Location"]).path == "/new-name"

    def test_percent_encoded_preferred_uri_is_served(self):
        response = self.client.get("/caf%C3%A9")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "menu"

    def test_alias_too_long(self):
        assert self.client.get("/" + "a" * 40).status_code == 400

    def test_lifecycle_aware_services_are_notified(self):
        self.client.get("/")
        self.client.get("/does-not-exist")

        assert AuditTrail.events == [
            (Event.END_RESPONSE, 1),
            (Event.END_FINALIZE, 1),
            (Event.END_FINALIZE, None),
        ]

    def test_session_is_saved(self):
        self.client.get("/")

        with self.client.session_transaction() as session:
            assert "started_at" in session
            assert "last_seen_at" in session


class TestDeliveryModeOption(TestCase):
    def test_suppress_mode_sends_nothing(self):
        app = create_app(delivery_mode="suppress")

        response = app.test_client().get("/")

        assert response.status_code == 204

    def test_asap_mode(self):
        app = create_app(delivery_mode="asap")

        assert app.test_client().get("/").status_code == 200


class TestCli(TestCase):
    def setUp(self):
        self.app = create_app()
        self.runner = self.app.test_cli_runner()

    def test_pages(self):
        result = self.runner.invoke(args=["pagecycle", "pages"])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 5
        assert lines[0].startswith("1\thome\t")
        assert lines[1].endswith("\t7")

    def test_probe_anonymous(self):
        result = self.runner.invoke(args=["pagecycle", "probe", "/reports"])

        assert result.exit_code == 0
        assert "status: 303" in result.output
        assert "location: /login?redirect=%2Freports" in result.output
        assert "page: 2" in result.output

    def test_probe_as_user(self):
        result = self.runner.invoke(args=["pagecycle", "probe", "/reports", "--user", "alice", "--program", "7"])

        assert result.exit_code == 0
        assert "status: 200" in result.output
        assert "state: finalized" in result.output


class TestPreferredUri(TestCase):
    def test_exception_carries_uri(self):
        assert NotPreferredUrlException("/x").uri == "/x"


class TestTemplates(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        app_templates = os.path.join(self.tmp.name, "templates")
        pages_templates = os.path.join(self.tmp.name, "pages")
        for folder, name, source in [
            (pages_templates, "greeting.html", "{{ page_title() }}: {{ name }}"),
            (pages_templates, "layout.html", "layout of the pages folder"),
            (app_templates, "layout.html", "layout of the application"),
        ]:
            os.makedirs(folder, exist_ok=True)
            with open(os.path.join(folder, name), "w") as f:
                f.write(source)

        registry = PageRegistry()

        @registry.page(1, alias="greeting", title="Welcome")
        class GreetingPage(Page):
            def handle_request(self):
                return self.render("greeting.html", name="visitor")

        @registry.page(2, alias="layout", title="Layout")
        class LayoutPage(Page):
            def handle_request(self):
                return self.render("layout.html", status=202)

        app = Flask(__name__, template_folder=app_templates)
        app.secret_key = "testing"
        app.config["TESTING"] = True
        Pagecycle(app, page_registry=registry, templates_path=pages_templates)
        self.client = app.test_client()

    def test_page_renders_from_the_pages_folder_with_its_title(self):
        response = self.client.get("/greeting")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Welcome: visitor"

    def test_templates_of_the_application_win(self):
        response = self.client.get("/layout")

        assert response.status_code == 202
        assert response.get_data(as_text=True) == "layout of the application"
