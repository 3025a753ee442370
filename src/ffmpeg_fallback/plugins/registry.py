"""Backend registry and discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from ffmpeg_fallback.adapters.ffmpeg import FfmpegBackend
from ffmpeg_fallback.adapters.pillow import PillowBackend
from ffmpeg_fallback.application.ports import ConversionBackend
from ffmpeg_fallback.errors import BackendError


class BackendRegistry:
    """Ordered registry of conversion backends.

    Backends are tried in registration order. A backend registered as the
    ``fallback`` always stays last so it can catch every request.
    """

    def __init__(self) -> None:
        self._backends: dict[str, ConversionBackend] = {}
        self._fallback: ConversionBackend | None = None

    def register(self, backend: ConversionBackend, *, fallback: bool = False) -> None:
        """Register backend instance by unique name.

        Parameters
        ----------
        backend : ConversionBackend
            Backend instance to register.
        fallback : bool, default=False
            Whether this backend is the catch-all tried last.

        Raises
        ------
        BackendError
            If backend does not provide a valid name or the name is taken.
        """
        name = getattr(backend, "name", "").strip()
        if not name:
            raise BackendError("Backend must define a non-empty 'name'.")
        if name in self._backends or (
            self._fallback is not None and self._fallback.name == name
        ):
            raise BackendError(f"Backend '{name}' is already registered.")
        if fallback:
            if self._fallback is not None:
                raise BackendError(
                    f"Fallback backend already set to '{self._fallback.name}'."
                )
            self._fallback = backend
            return
        self._backends[name] = backend

    def names(self) -> list[str]:
        """Return registered backend names in dispatch order."""
        return [backend.name for backend in self.ordered()]

    def ordered(self) -> list[ConversionBackend]:
        """Return backends in dispatch order, fallback last."""
        backends = list(self._backends.values())
        if self._fallback is not None:
            backends.append(self._fallback)
        return backends

    def get(self, name: str) -> ConversionBackend:
        """Get backend by name.

        Raises
        ------
        BackendError
            If backend name is not registered.
        """
        for backend in self.ordered():
            if backend.name == name:
                return backend
        raise BackendError(
            f"Unknown backend '{name}'. Available backends: {', '.join(self.names())}"
        )

    def load_module(self, module_or_path: str) -> None:
        """Load backend providers from module name or file path.

        .. warning::
            This method executes code from the specified module. Only load
            backends from trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Parameters
    ----------
    module_or_path : str
        Python module path or local file path. Must be from a trusted source.

    Returns
    -------
    ModuleType
        Imported module object.

    Raises
    ------
    BackendError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise BackendError(f"Unable to load backend module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise BackendError(
            f"Unable to import backend module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: BackendRegistry) -> None:
    """Register backend definitions found in module."""
    if hasattr(module, "register_backends"):
        module.register_backends(registry)
        return

    backends_obj = getattr(module, "BACKENDS", None)
    if backends_obj is not None:
        for backend in backends_obj:
            registry.register(backend)
        return

    backend_obj = getattr(module, "BACKEND", None)
    if backend_obj is not None:
        registry.register(backend_obj)
        return

    raise BackendError(
        "Backend module must expose register_backends(registry), BACKENDS, or BACKEND."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> BackendRegistry:
    """Create default backend registry.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional backend modules to load. Their backends run after FFmpeg
        and before the Pillow fallback.

    Returns
    -------
    BackendRegistry
        Registry with built-in and external backends.
    """
    registry = BackendRegistry()
    registry.register(FfmpegBackend())
    registry.register(PillowBackend(), fallback=True)
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
