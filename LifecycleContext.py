from dataclasses import dataclass, field

from pagecycle.Config import LifecycleConfig
from pagecycle.core_services.Babel import Babel
from pagecycle.core_services.RequestLogger import RequestLogger
from pagecycle.interfaces.AuthorizationResolver import AuthorizationResolver
from pagecycle.interfaces.ExceptionHandler import ExceptionHandler
from pagecycle.interfaces.Page import PageFactory
from pagecycle.interfaces.RequestParameterResolver import RequestParameterResolver
from pagecycle.interfaces.ResponseSink import ResponseSink
from pagecycle.interfaces.SessionStore import SessionStore
from pagecycle.interfaces.TransactionStore import TransactionStore


@dataclass
class LifecycleContext:
    """Everything a request lifecycle, and the page it constructs, talks to."""
    transaction_store: TransactionStore
    session: SessionStore
    authorization_resolver: AuthorizationResolver
    page_factory: PageFactory
    response_sink: ResponseSink
    exception_handler: ExceptionHandler
    request_parameter_resolver: RequestParameterResolver
    babel: Babel = field(default_factory=Babel)
    request_logger: RequestLogger = field(default_factory=RequestLogger)
    config: LifecycleConfig = field(default_factory=LifecycleConfig)
