import logging
from enum import Enum, IntEnum
from typing import Callable, Optional

from pagecycle.AdHocEventDispatcher import AdHocEventDispatcher
from pagecycle.Config import DeliveryMode, FinalizePolicy
from pagecycle.Exceptions import InvalidUrlException, NotAuthorizedException, NotPreferredUrlException, Phase
from pagecycle.LifecycleContext import LifecycleContext
from pagecycle.core_services.ErrorHandler import ErrorHandler
from pagecycle.core_services.Request import RequestParameters
from pagecycle.interfaces.AuthorizationResolver import PageDescriptor
from pagecycle.interfaces.ExceptionHandler import FailureContext
from pagecycle.interfaces.Page import Page

logger = logging.getLogger("pagecycle.lifecycle")


class Event(IntEnum):
    # The page has produced its response. Listeners may still use the database and session.
    END_RESPONSE = 1
    # The transaction is committed and the connection closed. Listeners CAN NOT use the database
    # or session anymore.
    END_FINALIZE = 2


class LifecycleState(Enum):
    INITIAL = "initial"
    PREPARED = "prepared"
    CONSTRUCTED = "constructed"
    RESPONDED = "responded"
    FINALIZED = "finalized"
    FAILED = "failed"


class RequestLifecycle:
    """
    Drives one page request through the prepare, construct, respond and finalize phases.

    Each phase catches its own exceptions and hands them to the exception handler of the context,
    whose response becomes the response of the request. A failing phase skips the phases that
    would produce a response; finalize still runs under FinalizePolicy.ALWAYS.

    Example:
        lifecycle = RequestLifecycle(context)
        lifecycle.add_listener(Event.END_FINALIZE, lambda: mailer.flush())
        response = lifecycle.handle()
    """

    def __init__(self, context: LifecycleContext, delivery_mode: DeliveryMode = DeliveryMode.FINAL,
                 finalize_policy: FinalizePolicy = FinalizePolicy.ALWAYS):
        self.context = context
        self.delivery_mode = delivery_mode
        self.finalize_policy = finalize_policy

        self._dispatcher = AdHocEventDispatcher()
        self._errors = ErrorHandler("pagecycle.lifecycle", log_to_console=False)
        self._state = LifecycleState.INITIAL
        self._failed_phase: Optional[Phase] = None
        self._connected = False
        self._in_transaction = False
        self._session_started = False
        self._sent = False

        self._parameters: Optional[RequestParameters] = None
        self._page_descriptor: Optional[PageDescriptor] = None
        self._page: Optional[Page] = None
        self._response = None
        self._pag_id: Optional[int] = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def failed_phase(self) -> Optional[Phase]:
        return self._failed_phase

    @property
    def page_id(self) -> Optional[int]:
        """The ID of the page requested, known once the page has been looked up."""
        return self._pag_id

    @property
    def parameters(self) -> Optional[RequestParameters]:
        return self._parameters

    @property
    def page_descriptor(self) -> Optional[PageDescriptor]:
        return self._page_descriptor

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def response(self):
        """The response of the request: the page's, or the one the exception handler made of a failure."""
        return self._response

    def add_listener(self, event: Event, listener: Callable[[], None]) -> None:
        """
        Adds a listener that must be called when an event occurs.

        Raises:
            ValueError: event is not one of the Event members.
        """
        self._dispatcher.add_listener(Event(event), listener)

    def handle(self):
        """Handles the page request and returns the response."""
        try:
            success = self._prepare()
            success = success and self._construct()
            success = success and self._respond()

            if success or self.finalize_policy is FinalizePolicy.ALWAYS:
                self._finalize()
        finally:
            # Exceptions the phases do not catch, or raised by the exception handler, propagate
            # with the transaction rolled back and the connection closed.
            self._release()

        if self.delivery_mode is DeliveryMode.FINAL:
            self._send()

        return self._response

    def _prepare(self) -> bool:
        """Preparation phase: all actions before creating the page object."""
        try:
            self.context.transaction_store.connect()
            self._connected = True
            self.context.transaction_store.begin()
            self._in_transaction = True

            self._parameters = self.context.request_parameter_resolver.resolve()

            self.context.session.start()
            self._session_started = True

            self.context.babel.set_language(self.context.session.lan_id)

            self._check_authorization()
        except Exception as exception:
            self._fail(Phase.PREPARE, exception)
            self._set_response(
                self.context.exception_handler.handle_prepare_exception(exception, self._failure_context())
            )
            return False

        self._state = LifecycleState.PREPARED
        return True

    def _check_authorization(self) -> None:
        """
        Looks up the requested page and checks the user agent is authorized for it.
        """
        config = self.context.config
        session = self.context.session

        pag_id = self._parameters.get_opt_id("pag")
        pag_alias = None
        if pag_id is None:
            pag_alias = self._parameters.get_opt_string("pag_alias", max_length=config.max_alias_length)
            if pag_alias is None:
                pag_id = config.index_page_id

        info = self.context.authorization_resolver.get_page_info(
            session.cmp_id,
            pag_id,
            session.pro_id,
            self.context.babel.lan_id,
            pag_alias
        )
        if info is None:
            raise InvalidUrlException("Page does not exist")

        self._pag_id = info.pag_id

        if not info.authorized:
            raise NotAuthorizedException("Not authorized for requested page")

        self._page_descriptor = info

    def _construct(self) -> bool:
        """Construct phase: creating the page object."""
        try:
            self._page = self.context.page_factory.create(self._page_descriptor, self.context)
        except Exception as exception:
            self._fail(Phase.CONSTRUCT, exception)
            self._set_response(
                self.context.exception_handler.handle_construct_exception(exception, self._failure_context())
            )
            return False

        self._state = LifecycleState.CONSTRUCTED
        return True

    def _respond(self) -> bool:
        """Response phase: generating the response by the page object."""
        try:
            self._page.check_authorization()

            uri = self._page.get_preferred_uri()
            if uri is not None and uri != self._parameters.request_uri:
                raise NotPreferredUrlException(uri)

            self._set_response(self._page.handle_request())

            self._dispatcher.notify(Event.END_RESPONSE)

            self.context.session.save()
        except Exception as exception:
            self._fail(Phase.RESPOND, exception)
            self._set_response(
                self.context.exception_handler.handle_response_exception(exception, self._failure_context())
            )
            return False

        self._state = LifecycleState.RESPONDED
        return True

    def _finalize(self) -> bool:
        """All actions after the response has been generated, or after a failure."""
        try:
            self.context.request_logger.log_request(getattr(self._response, "status_code", None))

            if self._state is not LifecycleState.FAILED:
                self.context.transaction_store.commit()
                self._in_transaction = False
            self._disconnect()

            self._dispatcher.notify(Event.END_FINALIZE)
        except Exception as exception:
            self._fail(Phase.FINALIZE, exception)
            self._release()
            self._set_response(
                self.context.exception_handler.handle_finalize_exception(exception, self._failure_context())
            )
            return False

        if self._state is not LifecycleState.FAILED:
            self._state = LifecycleState.FINALIZED
        return True

    def _fail(self, phase: Phase, exception: Exception) -> None:
        if self._state is not LifecycleState.FAILED:
            self._failed_phase = phase
        self._state = LifecycleState.FAILED
        logger.debug(f"{phase.value} phase failed: {type(exception).__name__}: {exception}")
        self._rollback()

    def _failure_context(self) -> FailureContext:
        is_anonymous = True
        if self._session_started:
            with self._errors.handle_errors({Exception: "Cannot determine whether the session is anonymous"}):
                is_anonymous = self.context.session.is_anonymous()

        return FailureContext(
            request_uri=self._parameters.request_uri if self._parameters is not None else None,
            is_anonymous=is_anonymous,
        )

    def _rollback(self) -> None:
        if not self._in_transaction:
            return
        self._in_transaction = False
        with self._errors.handle_errors({Exception: "Transaction rollback failed"}):
            self.context.transaction_store.rollback()

    def _disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        self._in_transaction = False
        self.context.transaction_store.disconnect()

    def _release(self) -> None:
        # Best-effort: roll back whatever is pending and give back the connection.
        self._rollback()
        with self._errors.handle_errors({Exception: "Disconnect failed"}):
            self._disconnect()

    def _set_response(self, response) -> None:
        if self._sent:
            logger.warning(
                f"Response {getattr(self._response, 'status_code', None)} already sent, "
                f"discarding response {getattr(response, 'status_code', None)}"
            )
            return

        self._response = response

        if self.delivery_mode is DeliveryMode.ASAP:
            self._send()

    def _send(self) -> None:
        if self._sent or self._response is None:
            return
        self._sent = True
        self.context.response_sink.send(self._response)
