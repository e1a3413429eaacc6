"""
Directive extensions for SADL.

An extension owns one top-level directive keyword. When the parser meets
that keyword it hands the live parser to the extension, which pulls the
rest of its construct from the same token stream. After the Model is built
the extension validates what it parsed against the Model.

Extensions are registered as factories so that every parse gets fresh
extension state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .errors import ExtensionError

if TYPE_CHECKING:
    from .dsl_parser_impl.base import ParserProtocol
    from .model import Model

logger = logging.getLogger(__name__)


@runtime_checkable
class Extension(Protocol):
    """Interface implemented by directive extensions."""

    name: str

    def parse_directive(self, parser: ParserProtocol, comment: str) -> None:
        """Consume one occurrence of the directive from ``parser``."""
        ...

    def result(self) -> Any:
        """Return the parsed payload, stored in ``Model.extensions[name]``."""
        ...

    def validate(self, model: Model) -> list[str]:
        """Return validation problems found against the assembled Model."""
        ...


ExtensionFactory = Callable[[], Extension]


class ExtensionRegistry:
    """Name-keyed table of extension factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ExtensionFactory] = {}

    def register(self, name: str, factory: ExtensionFactory) -> None:
        """
        Register an extension factory under its directive name.

        Raises:
            ExtensionError: If the name is already registered
        """
        if name in self._factories:
            raise ExtensionError(f"Extension already exists: {name}")
        self._factories[name] = factory
        logger.debug(f"Registered extension '{name}'")

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def create(self, name: str) -> Extension:
        """
        Instantiate a registered extension.

        Raises:
            ExtensionError: If no extension is registered under ``name``
        """
        factory = self._factories.get(name)
        if factory is None:
            known = ", ".join(self.names()) or "none"
            raise ExtensionError(f"Unknown extension: {name} (available: {known})")
        return factory()

    def create_all(self, names: list[str]) -> list[Extension]:
        return [self.create(name) for name in names]


_registry: ExtensionRegistry | None = None


def get_registry() -> ExtensionRegistry:
    """Return the process-wide registry, with the bundled extensions registered."""
    global _registry
    if _registry is None:
        _registry = ExtensionRegistry()
        from ..extensions import register_bundled

        register_bundled(_registry)
    return _registry
