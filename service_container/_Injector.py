from pagecycle.Config import LifecycleConfig
from pagecycle.LifecycleContext import LifecycleContext

from ._ContainerInterface import ContainerInterface

# Constructor argument of LifecycleContext ➜ id of the service in the container.
CONTEXT_SERVICES = {
    "transaction_store": "TransactionStore",
    "session": "SessionStore",
    "authorization_resolver": "AuthorizationResolver",
    "page_factory": "PageFactory",
    "response_sink": "ResponseSink",
    "exception_handler": "ExceptionHandler",
    "request_parameter_resolver": "RequestParameterResolver",
    "babel": "Babel",
    "request_logger": "RequestLogger",
}


def service_resolver(container: ContainerInterface, service_name: str, param: str):
    """Resolves and retrieves the appropriate service from the container."""
    if not container.has(service_name):
        raise ValueError(
            f"[Injector] Cannot resolve service '{service_name}' for '{param}' of the lifecycle context. "
            f"Ensure it is registered in the container."
        )
    return container.get(service_name)


def build_context(container: ContainerInterface, config: LifecycleConfig) -> LifecycleContext:
    """Creates the context of one request from the services in the container."""
    services = {
        param: service_resolver(container, service_name, param)
        for param, service_name in CONTEXT_SERVICES.items()
    }
    return LifecycleContext(config=config, **services)


def singleton(cls):
    cls.__singleton__ = True
    return cls
