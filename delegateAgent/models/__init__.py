"""Chat model provider resolution."""

from .registry import (
    KNOWN_INTEGRATIONS,
    ModelFactory,
    ProviderLoader,
    ProviderRegistry,
    class_factory,
    import_integration,
)

__all__ = [
    "KNOWN_INTEGRATIONS",
    "ModelFactory",
    "ProviderLoader",
    "ProviderRegistry",
    "class_factory",
    "import_integration",
]
