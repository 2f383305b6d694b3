import inspect

from ._ContainerInterface import ContainerInterface, ServiceNotFound


class ServiceContainer(ContainerInterface):
    """
    Services are classes, instantiated without arguments, or factories called with the container
    so they can resolve the services they depend on. Singletons are created once, all other
    services once per get().
    """

    def __init__(self):
        self._services = {}
        self._singletons = {}
        self._instances = {}

    def add(self, id, service, singleton=False):
        """Add a service or singleton to the container. A later add() replaces an earlier one."""
        self._services.pop(id, None)
        self._singletons.pop(id, None)
        self._instances.pop(id, None)

        if singleton or getattr(service, "__singleton__", False):
            self._singletons[id] = service
        else:
            self._services[id] = service

    def add_instance(self, id, instance):
        """Add an already created object as a singleton."""
        self.add(id, lambda container: instance, singleton=True)
        self._instances[id] = instance

    def get(self, id):
        """Retrieve a service or singleton from the container."""
        if self.has_singleton(id):
            if id not in self._instances:
                self._instances[id] = self._create(self._singletons[id])
            return self._instances[id]

        if id in self._services:
            return self._create(self._services[id])

        raise ServiceNotFound(id)

    def has(self, id) -> bool:
        """Check if the service or singleton exists in the container."""
        return id in self._services or id in self._singletons

    def has_singleton(self, id) -> bool:
        """Check if the singleton exists in the container."""
        return id in self._singletons

    def singletons(self):
        """Yields (id, instance) of all singletons, creating them when needed."""
        for id in list(self._singletons):
            yield id, self.get(id)

    def _create(self, service):
        # Classes are instantiated as is, other factories receive the container.
        if inspect.isclass(service):
            return service()
        return service(self)
