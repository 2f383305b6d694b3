from flask import request

from pagecycle.Config import LifecycleConfig
from pagecycle.core_services.Babel import Babel
from pagecycle.core_services.CoreExceptionHandler import CoreExceptionHandler
from pagecycle.core_services.ErrorHandler import ErrorHandler
from pagecycle.core_services.PageRegistry import PageRegistry, RegistryAuthorizationResolver
from pagecycle.core_services.Request import FlaskRequestParameterResolver
from pagecycle.core_services.RequestLogger import RequestLogger
from pagecycle.core_services.ResponseSink import FlaskResponseSink
from pagecycle.core_services.Session import FlaskSession
from pagecycle.core_services.Sqlite3Database import Sqlite3Database
from pagecycle.service_container._ServiceContainer import ServiceContainer


def default_services(config: LifecycleConfig, page_registry: PageRegistry) -> dict:
    """
    The services every request needs, as id ➜ (factory, singleton).
    Factories are called with the container.
    """
    return {
        "PageRegistry": (lambda c: page_registry, True),
        "ErrorHandler": (lambda c: ErrorHandler("pagecycle.errors"), True),
        "ExceptionHandler": (lambda c: CoreExceptionHandler(
            login_url=config.login_url,
            return_parameter=config.return_parameter,
            error_handler=c.get("ErrorHandler"),
            debug=config.debug,
        ), True),
        "AuthorizationResolver": (lambda c: RegistryAuthorizationResolver(c.get("PageRegistry")), True),
        "PageFactory": (lambda c: c.get("PageRegistry"), True),
        "TransactionStore": (lambda c: Sqlite3Database(config.database_path), False),
        "SessionStore": (lambda c: FlaskSession(config.default_company_id, config.default_language_id), False),
        "RequestParameterResolver": (lambda c: FlaskRequestParameterResolver(), False),
        "ResponseSink": (lambda c: FlaskResponseSink(), False),
        "Babel": (lambda c: Babel(config.default_language_id), False),
        "RequestLogger": (lambda c: RequestLogger(request.method, request.path), False),
    }


def init_container(app, config: LifecycleConfig, page_registry: PageRegistry, services: dict = None, debug=False):
    """
    Creates app.container with the default services, then registers the services of the
    application, which replace defaults with the same id.
    """
    app.container = ServiceContainer()

    for id, (factory, is_singleton) in default_services(config, page_registry).items():
        app.container.add(id, factory, singleton=is_singleton)

    for id, service in (services or {}).items():
        if debug:
            print(f"[Container] Registered {id} ➜ {service!r}")
        if callable(service):
            app.container.add(id, service)
        else:
            app.container.add_instance(id, service)

    return app
