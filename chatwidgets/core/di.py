"""Dependency injection container with lifetime-aware resolution.

Services are registered on a ``ServiceCollection`` at startup, then frozen into
a root ``ServiceProvider``. Each request gets its own scope from
``create_scope()``:

- SINGLETON instances are cached by the root provider
- SCOPED instances are cached by the scope that resolved them
- TRANSIENT instances are never cached

Descriptors may be keyed by a name so several implementations of the same
service type can coexist (named agents, for example).
"""

import inspect
import threading
import typing
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

from chatwidgets.domain.errors import ServiceNotRegisteredError

T = TypeVar("T")

ServiceKey = tuple[Any, str | None]
Factory = Callable[["ServiceProvider"], Any]


class Lifetime(str, Enum):
    """How long a resolved instance is reused."""

    SINGLETON = "singleton"
    SCOPED = "scoped"
    TRANSIENT = "transient"


@runtime_checkable
class CapabilityResolver(Protocol):
    """What request handlers may ask of the host's container."""

    def get(self, service_type: Any, key: str | None = None) -> Any | None:
        ...

    def get_required(self, service_type: Any, key: str | None = None) -> Any:
        ...

    def resolve_named(self, service_type: Any, name: str) -> Any | None:
        ...

    def construct(self, cls: type[T], **overrides: Any) -> T:
        ...

    def create_scope(self) -> "ServiceScope":
        ...


@dataclass(frozen=True)
class ServiceDescriptor:
    """A registration: how to build a service and how long to keep it."""

    service_type: Any
    factory: Factory
    lifetime: Lifetime
    key: str | None = None

    @property
    def service_key(self) -> ServiceKey:
        return (self.service_type, self.key)


def _as_factory(implementation: Any) -> Factory:
    """Classes are built through ``construct``; anything else is a factory."""
    if inspect.isclass(implementation):
        return lambda provider: provider.construct(implementation)
    if callable(implementation):
        return implementation
    raise TypeError(f"Cannot register {implementation!r}: expected a class or factory")


class ServiceCollection:
    """Mutable set of service descriptors, filled in at startup."""

    def __init__(self) -> None:
        self._descriptors: dict[ServiceKey, ServiceDescriptor] = {}
        self._options: dict[type, Any] = {}

    def add(
        self,
        service_type: Any,
        implementation: Any = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
        *,
        key: str | None = None,
    ) -> "ServiceCollection":
        """Register a service. A later registration for the same key wins.

        Args:
            service_type: Type used to look the service up
            implementation: Class to construct, or ``factory(provider)``.
                Defaults to ``service_type`` itself.
            lifetime: Instance reuse policy
            key: Optional name distinguishing implementations of one type
        """
        descriptor = ServiceDescriptor(
            service_type=service_type,
            factory=_as_factory(implementation if implementation is not None else service_type),
            lifetime=Lifetime(lifetime),
            key=key,
        )
        self._descriptors[descriptor.service_key] = descriptor
        return self

    def try_add(
        self,
        service_type: Any,
        implementation: Any = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
        *,
        key: str | None = None,
    ) -> "ServiceCollection":
        """Register only if nothing is registered for this type and key yet."""
        if not self.contains(service_type, key=key):
            self.add(service_type, implementation, lifetime, key=key)
        return self

    def add_singleton(self, service_type: Any, implementation: Any = None, *, key: str | None = None) -> "ServiceCollection":
        return self.add(service_type, implementation, Lifetime.SINGLETON, key=key)

    def add_scoped(self, service_type: Any, implementation: Any = None, *, key: str | None = None) -> "ServiceCollection":
        return self.add(service_type, implementation, Lifetime.SCOPED, key=key)

    def add_transient(self, service_type: Any, implementation: Any = None, *, key: str | None = None) -> "ServiceCollection":
        return self.add(service_type, implementation, Lifetime.TRANSIENT, key=key)

    def add_instance(self, service_type: Any, instance: Any, *, key: str | None = None) -> "ServiceCollection":
        """Register an already-built object as a singleton."""
        return self.add(service_type, lambda _provider: instance, Lifetime.SINGLETON, key=key)

    def configure(self, options_type: type[T], configure: Callable[[T], None]) -> T:
        """Apply ``configure`` to the shared options object of ``options_type``.

        The options instance is created on first use and registered as a
        singleton, so every call mutates the same object.
        """
        options = self._options.get(options_type)
        if options is None:
            options = options_type()
            self._options[options_type] = options
            self.add_instance(options_type, options)
        configure(options)
        return options

    def contains(self, service_type: Any, *, key: str | None = None) -> bool:
        return (service_type, key) in self._descriptors

    def descriptors(self) -> list[ServiceDescriptor]:
        return list(self._descriptors.values())

    def build_provider(self) -> "ServiceProvider":
        """Freeze the current descriptors into a root provider."""
        return ServiceProvider(dict(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)


class ServiceProvider:
    """Resolves services and applies lifetime caching.

    The root provider owns singleton instances; scopes created from it share
    the descriptor table and the root, and own their scoped instances.
    """

    def __init__(
        self,
        descriptors: dict[ServiceKey, ServiceDescriptor],
        root: "ServiceProvider | None" = None,
    ) -> None:
        self._descriptors = descriptors
        self._root = root or self
        self._instances: dict[ServiceKey, Any] = {}
        self._lock = threading.RLock()

    def create_scope(self) -> "ServiceScope":
        return ServiceScope(self._descriptors, root=self._root)

    def get(self, service_type: Any, key: str | None = None) -> Any | None:
        """Resolve a service, or return None if it is not registered."""
        if key is None and service_type in (ServiceProvider, CapabilityResolver):
            return self
        descriptor = self._descriptors.get((service_type, key))
        if descriptor is None:
            return None
        return self._resolve(descriptor)

    def get_required(self, service_type: Any, key: str | None = None) -> Any:
        """Resolve a service.

        Raises:
            ServiceNotRegisteredError: If nothing is registered for the type and key
        """
        instance = self.get(service_type, key)
        if instance is None:
            service = _type_name(service_type) + (f"[{key}]" if key is not None else "")
            raise ServiceNotRegisteredError(
                message=f"No service registered for {service}",
                service=service,
            )
        return instance

    def resolve_named(self, service_type: Any, name: str) -> Any | None:
        """Resolve the implementation of ``service_type`` registered under ``name``."""
        if not name:
            return None
        return self.get(service_type, key=name)

    def construct(self, cls: type[T], **overrides: Any) -> T:
        """Instantiate ``cls``, filling ``__init__`` parameters from the container.

        Parameters are matched by type annotation. Explicit ``overrides`` win;
        unresolvable parameters with defaults keep their defaults.

        Raises:
            ServiceNotRegisteredError: If a required parameter cannot be resolved
        """
        kwargs: dict[str, Any] = {}
        hints = _init_type_hints(cls)

        for name, param in _init_params(cls).items():
            if name in overrides:
                kwargs[name] = overrides[name]
                continue

            hint = hints.get(name)
            instance = self.get(hint) if hint is not None and _is_service_key(hint) else None
            if instance is not None:
                kwargs[name] = instance
            elif param.default is inspect.Parameter.empty:
                raise ServiceNotRegisteredError(
                    message=(
                        f"Cannot construct {cls.__name__}: no service registered "
                        f"for parameter '{name}' ({_type_name(hint)})"
                    ),
                    service=_type_name(hint),
                    details={"class": cls.__name__, "parameter": name},
                )

        return cls(**kwargs)

    def _resolve(self, descriptor: ServiceDescriptor) -> Any:
        if descriptor.lifetime is Lifetime.TRANSIENT:
            return descriptor.factory(self)

        owner = self._root if descriptor.lifetime is Lifetime.SINGLETON else self
        with owner._lock:
            if descriptor.service_key in owner._instances:
                return owner._instances[descriptor.service_key]
            instance = descriptor.factory(owner)
            owner._instances[descriptor.service_key] = instance
            return instance


class ServiceScope(ServiceProvider):
    """A provider whose scoped instances live until the scope is closed."""

    def close(self) -> None:
        with self._lock:
            self._instances.clear()

    def __enter__(self) -> "ServiceScope":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _init_params(cls: type) -> dict[str, inspect.Parameter]:
    """Get the named parameters that a class's __init__ accepts."""
    try:
        sig = inspect.signature(cls.__init__)
    except (ValueError, TypeError):
        return {}
    return {
        name: param
        for name, param in sig.parameters.items()
        if name != "self"
        and param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    }


def _init_type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls.__init__)
    except (NameError, TypeError):
        return {}


def _is_service_key(hint: Any) -> bool:
    try:
        hash(hint)
    except TypeError:
        return False
    return True


def _type_name(service_type: Any) -> str:
    return getattr(service_type, "__name__", repr(service_type))
