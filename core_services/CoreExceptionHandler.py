import traceback
from typing import Iterable, Optional
from urllib.parse import urlencode

from markupsafe import Markup
from werkzeug.exceptions import BadRequest, Forbidden, HTTPException, InternalServerError, NotFound, Unauthorized
from werkzeug.utils import redirect
from werkzeug.wrappers import Response

from pagecycle.Exceptions import DataAccessException, FailureKind, LifecycleException, NotPreferredUrlException, Phase
from pagecycle.core_services.ErrorHandler import ErrorHandler
from pagecycle.interfaces.ExceptionHandler import ExceptionHandler, FailureContext

# Exceptions raised by pages through flask.abort().
HTTP_EXCEPTION_KINDS = {
    NotFound: FailureKind.INVALID_URL,
    BadRequest: FailureKind.BAD_REQUEST,
    Unauthorized: FailureKind.NOT_AUTHORIZED,
    Forbidden: FailureKind.NOT_AUTHORIZED,
}


class CoreExceptionHandler(ExceptionHandler):
    """
    Translates the exceptions raised in the phases of the request lifecycle into responses.

    The kind of failure decides the status code, the phase only decides how an exception is
    classified: a data access failure while constructing a page means the URL is stale
    (404), anywhere else it is a server error (500).

    :param login_url: where anonymous user agents are sent when they lack access
    :param return_parameter: query parameter of the login URL holding the requested URI
    :param recognized_kinds: failure kinds this handler answers specifically, all others become 500
    :param error_handler: logs unclassified exceptions
    :param debug: show the traceback in the body of 500 responses
    """

    def __init__(self, login_url: str = "/login", return_parameter: str = "redirect",
                 recognized_kinds: Optional[Iterable[FailureKind]] = None, error_handler: ErrorHandler = None,
                 debug: bool = False):
        self.login_url = login_url
        self.return_parameter = return_parameter
        self.recognized_kinds = frozenset(recognized_kinds) if recognized_kinds is not None else frozenset(FailureKind)
        self.error_handler = error_handler or ErrorHandler()
        self.debug = debug

    def handle_prepare_exception(self, exception, context: FailureContext):
        return self.handle(exception, Phase.PREPARE, context)

    def handle_construct_exception(self, exception, context: FailureContext):
        return self.handle(exception, Phase.CONSTRUCT, context)

    def handle_response_exception(self, exception, context: FailureContext):
        return self.handle(exception, Phase.RESPOND, context)

    def handle_finalize_exception(self, exception, context: FailureContext):
        return self.handle(exception, Phase.FINALIZE, context)

    def classify(self, exception: BaseException, phase: Phase) -> FailureKind:
        kind = FailureKind.UNCLASSIFIED

        if isinstance(exception, LifecycleException):
            kind = exception.kind
        elif isinstance(exception, HTTPException):
            kind = next(
                (k for exc_type, k in HTTP_EXCEPTION_KINDS.items() if isinstance(exception, exc_type)),
                FailureKind.UNCLASSIFIED
            )
        elif isinstance(exception, DataAccessException) and phase is Phase.CONSTRUCT:
            kind = FailureKind.INVALID_URL

        if kind not in self.recognized_kinds:
            return FailureKind.UNCLASSIFIED
        return kind

    def handle(self, exception: BaseException, phase: Phase, context: FailureContext) -> Response:
        kind = self.classify(exception, phase)
        self.error_handler.logger.info(f"{phase.value} failed with {kind.value}: {type(exception).__name__}: {exception}")

        if kind is FailureKind.INVALID_URL:
            return NotFound().get_response()

        if kind is FailureKind.NOT_AUTHORIZED:
            if context.is_anonymous:
                return redirect(self.login_uri(context.request_uri), code=303)
            # Do not reveal that the page exists.
            return NotFound().get_response()

        if kind is FailureKind.NOT_PREFERRED_URL and isinstance(exception, NotPreferredUrlException):
            return redirect(exception.uri, code=301)

        if kind is FailureKind.BAD_REQUEST:
            return BadRequest().get_response()

        self.error_handler.record(exception, f"Unhandled exception in {phase.value} phase")
        return self.server_error(exception)

    def login_uri(self, request_uri: Optional[str]) -> str:
        if not request_uri:
            return self.login_url
        separator = "&" if "?" in self.login_url else "?"
        return f"{self.login_url}{separator}{urlencode({self.return_parameter: request_uri})}"

    def server_error(self, exception: BaseException) -> Response:
        if not self.debug:
            return InternalServerError().get_response()

        trace = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
        body = Markup("<h1>Internal Server Error</h1><pre>{}</pre>").format(trace)
        return Response(str(body), status=500, mimetype="text/html")
