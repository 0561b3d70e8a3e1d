"""
Code generation backends.

Contains the target-specific renderers and the registry that maps a
language name to its backend.
"""

from __future__ import annotations

from ..config import CodeGeneratorConfig
from .base import CodeBackend
from .golang_backend import GolangBackend
from .kotlin_backend import KotlinBackend
from .proto_backend import ProtoBackend

_BACKENDS: dict[str, type[CodeBackend]] = {}


def register_backend(language: str, backend: type[CodeBackend]) -> None:
    """Register a backend under a language name.

    Raises:
        ValueError: If the name is already registered
    """
    if language in _BACKENDS:
        raise ValueError(f"Backend already registered for language {language!r}")
    _BACKENDS[language] = backend


def get_backend(language: str, config: CodeGeneratorConfig) -> CodeBackend:
    """Create the backend for a language.

    Raises:
        ValueError: If no backend is registered under that name
    """
    backend = _BACKENDS.get(language)
    if backend is None:
        raise ValueError(f"Unknown language {language!r} (available: {', '.join(list_backends())})")
    return backend(config)


def list_backends() -> list[str]:
    """Registered language names, sorted."""
    return sorted(_BACKENDS)


register_backend("go", GolangBackend)
register_backend("kotlin", KotlinBackend)
register_backend("proto", ProtoBackend)

__all__ = [
    "CodeBackend",
    "GolangBackend",
    "KotlinBackend",
    "ProtoBackend",
    "register_backend",
    "get_backend",
    "list_backends",
]
