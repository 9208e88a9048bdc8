"""Core infrastructure shared across layers."""

from chatwidgets.core.di import (
    CapabilityResolver,
    Lifetime,
    ServiceCollection,
    ServiceDescriptor,
    ServiceProvider,
    ServiceScope,
)

__all__ = [
    "CapabilityResolver",
    "Lifetime",
    "ServiceCollection",
    "ServiceDescriptor",
    "ServiceProvider",
    "ServiceScope",
]
