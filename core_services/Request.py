from typing import Any, Optional

from flask import request
from werkzeug.urls import iri_to_uri

from pagecycle.Exceptions import BadRequestException
from pagecycle.interfaces.RequestParameterResolver import RequestParameterResolver


class RequestParameters:
    """
    The parameters of a request in canonical form, plus the URI as requested by the user agent.
    """

    def __init__(self, parameters: dict = None, request_uri: str = "/"):
        self._parameters = dict(parameters or {})
        self.request_uri = request_uri

    def input(self, key, default=None) -> Any:
        value = self._parameters.get(key)
        if value is None or value == "":
            return default
        return value

    def get_opt_id(self, key) -> Optional[int]:
        value = self.input(key)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise BadRequestException(f"Parameter '{key}' must be an integer, got {value!r}")

    def get_opt_string(self, key, max_length: int = None) -> Optional[str]:
        value = self.input(key)
        if value is None:
            return None
        value = str(value)
        if max_length is not None and len(value) > max_length:
            raise BadRequestException(f"Parameter '{key}' exceeds {max_length} characters")
        return value


class FlaskRequestParameterResolver(RequestParameterResolver):
    """
    Reads the parameters of the current Flask request.

    Pages are addressed by ?pag=<id>, ?pag_alias=<alias> or by a clean URL of which the path is the
    alias, e.g. /about ➜ {"pag_alias": "about"}.
    """

    def resolve(self) -> RequestParameters:
        parameters = {key: value for key, value in request.args.items()}
        if request.method == "POST":
            for key, value in request.form.items():
                parameters.setdefault(key, value)

        path = request.path.strip("/")
        if path and "pag" not in parameters and "pag_alias" not in parameters:
            parameters["pag_alias"] = path

        return RequestParameters(parameters, self.request_uri())

    @staticmethod
    def request_uri() -> str:
        """The URI as sent by the user agent, percent-encoded like the URIs url_for builds."""
        raw = request.environ.get("REQUEST_URI") or request.environ.get("RAW_URI")
        if raw:
            return raw

        # full_path is decoded and always ends with "?", even without a query string
        uri = request.full_path
        return iri_to_uri(uri[:-1] if uri.endswith("?") else uri)
