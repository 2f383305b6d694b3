from enum import Enum


class FailureKind(Enum):
    INVALID_URL = "invalid_url"
    NOT_AUTHORIZED = "not_authorized"
    NOT_PREFERRED_URL = "not_preferred_url"
    BAD_REQUEST = "bad_request"
    UNCLASSIFIED = "unclassified"


class Phase(Enum):
    PREPARE = "prepare"
    CONSTRUCT = "construct"
    RESPOND = "respond"
    FINALIZE = "finalize"


class LifecycleException(Exception):
    """Base class for failures the exception handler knows how to answer."""
    kind = FailureKind.UNCLASSIFIED


class InvalidUrlException(LifecycleException):
    # The requested page or alias does not exist.
    kind = FailureKind.INVALID_URL


class NotAuthorizedException(LifecycleException):
    # The page exists but the user agent may not see it.
    kind = FailureKind.NOT_AUTHORIZED


class BadRequestException(LifecycleException):
    kind = FailureKind.BAD_REQUEST


class NotPreferredUrlException(LifecycleException):
    """
    Raised when a page is requested under a URI other than its canonical one.
    Not an error: the user agent is sent a permanent redirect to `uri`.
    """
    kind = FailureKind.NOT_PREFERRED_URL

    def __init__(self, uri: str):
        super().__init__(f"Preferred URI is {uri}")
        self.uri = uri


class DataAccessException(Exception):
    # Raised by data stores when a query cannot be answered.
    pass
