"""Backend registry for pluggable image converters."""

from .registry import BackendRegistry, create_default_registry

__all__ = ["BackendRegistry", "create_default_registry"]
