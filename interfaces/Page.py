from abc import ABC, abstractmethod
from typing import Optional


class Page(ABC):
    def __init__(self, context):
        self.context = context

    def check_authorization(self) -> None:
        """
        Raises NotAuthorizedException when the user agent may not see this page.
        Called after the router has granted access, so pages only check their own rules.
        """
        pass

    def get_preferred_uri(self) -> Optional[str]:
        return None

    @abstractmethod
    def handle_request(self):
        """Returns the response for the request."""
        pass

    def render(self, template: str, status: int = 200, **context):
        from flask import Response, render_template

        return Response(render_template(template, page=self, **context), status=status)


class PageFactory(ABC):
    @abstractmethod
    def create(self, descriptor, context) -> Page:
        pass
