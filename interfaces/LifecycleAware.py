class LifecycleAware:
    """
    Services registered as singletons in the container that extend this class are
    notified of the lifecycle events of every page request.
    """

    def on_end_response(self, lifecycle):
        """After the page has produced its response. Database and session are still available."""
        pass

    def on_end_finalize(self, lifecycle):
        """After commit and disconnect. Database and session are NOT available anymore."""
        pass
