from pagecycle.interfaces.ResponseSink import ResponseSink


class FlaskResponseSink(ResponseSink):
    """
    WSGI cannot flush a response half way through a view, so sending means handing the response
    over to the Flask view, which returns it once the lifecycle is done.
    """

    def __init__(self):
        self.delivered = None

    def send(self, response) -> None:
        if self.delivered is not None:
            raise RuntimeError("A response has already been sent to the user agent")
        self.delivered = response
