import functools
import os

import click
from dotenv import load_dotenv
from flask import Flask, g
from flask.cli import AppGroup
from jinja2 import ChoiceLoader, FileSystemLoader

from .Config import DeliveryMode, FinalizePolicy, LifecycleConfig
from .Exceptions import (BadRequestException, DataAccessException, FailureKind, InvalidUrlException,
                         NotAuthorizedException, NotPreferredUrlException, Phase)
from .RequestLifecycle import Event, LifecycleState, RequestLifecycle
from .core_services.PageRegistry import PageRegistry
from .interfaces.LifecycleAware import LifecycleAware
from .interfaces.Page import Page
from .service_container._Injector import build_context, singleton
from .service_container._ServiceLoader import init_container

__all__ = [
    "Pagecycle", "PageRegistry", "Page", "RequestLifecycle", "Event", "LifecycleState", "LifecycleConfig",
    "DeliveryMode", "FinalizePolicy", "LifecycleAware", "singleton", "FailureKind", "Phase",
    "InvalidUrlException", "NotAuthorizedException", "NotPreferredUrlException", "BadRequestException",
    "DataAccessException", "run_lifecycle",
]


def wire_lifecycle_aware(container, lifecycle: RequestLifecycle, debug=False):
    """Registers the LifecycleAware singletons of the container as listeners of the lifecycle."""
    for name, instance in container.singletons():
        if isinstance(instance, LifecycleAware):
            lifecycle.add_listener(Event.END_RESPONSE, functools.partial(instance.on_end_response, lifecycle))
            lifecycle.add_listener(Event.END_FINALIZE, functools.partial(instance.on_end_finalize, lifecycle))
            if debug:
                print(f"[Lifecycle] {name} listens to {Event.END_RESPONSE.name}, {Event.END_FINALIZE.name}")


def run_lifecycle(app: Flask, delivery_mode: DeliveryMode = None) -> RequestLifecycle:
    """Runs the lifecycle for the current request of app and returns it."""
    config: LifecycleConfig = app.pagecycle_config
    context = build_context(app.container, config)
    lifecycle = RequestLifecycle(
        context,
        delivery_mode=delivery_mode or config.delivery_mode,
        finalize_policy=config.finalize_policy,
    )
    wire_lifecycle_aware(app.container, lifecycle, config.debug)
    g.pagecycle_lifecycle = lifecycle

    lifecycle.handle()
    return lifecycle


def Pagecycle(app: Flask, page_registry: PageRegistry = None, services: dict = None, debug=False, **kwargs):
    """Initializes the Flask application: configuration, service container, the page route and
    the CLI commands.

    All requests not matched by another route of the app are page requests handled by a
    RequestLifecycle. Keyword arguments override the PAGECYCLE_* environment variables.
    """
    load_dotenv()
    app.secret_key = os.getenv('APP_SECRET_KEY', app.secret_key)

    config = LifecycleConfig.from_env(**kwargs)
    if debug:
        config.debug = True
    app.pagecycle_config = config
    app.page_registry = page_registry if page_registry is not None else PageRegistry()

    init_container(app, config, app.page_registry, services=services, debug=config.debug)

    # Pages render templates from the application first, then from the pages folder.
    loaders = [loader for loader in (app.jinja_loader,) if loader is not None]
    app.jinja_loader = ChoiceLoader(loaders + [FileSystemLoader(config.templates_path)])

    def page_view(path=""):
        lifecycle = run_lifecycle(app)
        delivered = getattr(lifecycle.context.response_sink, "delivered", lifecycle.response)
        if delivered is None:
            # SUPPRESS mode
            return "", 204
        return delivered

    app.add_url_rule("/", "pagecycle_page", page_view, methods=["GET", "POST"], defaults={"path": ""})
    app.add_url_rule("/<path:path>", "pagecycle_page", page_view, methods=["GET", "POST"])

    @app.template_global("page_title")
    def page_title():
        lifecycle = g.get("pagecycle_lifecycle")
        if lifecycle is None or lifecycle.page_descriptor is None:
            return ""
        return lifecycle.page_descriptor.title

    cli = AppGroup("pagecycle", help="Inspect the pages of the application.")

    @cli.command("pages")
    def pages():
        """List the registered pages."""
        for record in app.page_registry:
            access = "public" if record.programs is None else ",".join(str(p) for p in sorted(record.programs))
            click.echo(f"{record.pag_id}\t{record.alias or '-'}\t{record.pag_class}\t{record.title(None)}\t{access}")

    @cli.command("probe")
    @click.argument("uri")
    @click.option("--user", default=None, help="Identity to put in the session.")
    @click.option("--program", type=int, default=None, help="Profile ID to put in the session.")
    def probe(uri, user, program):
        """Run the lifecycle for URI without sending the response."""
        with app.test_request_context(uri):
            from flask import session

            if user is not None:
                session[os.getenv("AUTH_IDENTITY_KEY", "user_id")] = user
            if program is not None:
                session["pro_id"] = program

            lifecycle = run_lifecycle(app, delivery_mode=DeliveryMode.SUPPRESS)
            response = lifecycle.response
            click.echo(f"state: {lifecycle.state.value}")
            click.echo(f"page: {lifecycle.page_id}")
            click.echo(f"status: {response.status_code}")
            if response.location:
                click.echo(f"location: {response.location}")

    app.cli.add_command(cli)

    return app
