"""
Bundled SADL directive extensions.

Extensions listed here are registered with the process-wide registry the
first time it is requested. Enable one per parse by name, for example
``parse_file(path, extensions=["graphql"])`` or ``extensions = ["graphql"]``
in ``sadl.toml``.
"""

from ..core.extensions import ExtensionRegistry
from .graphql import GraphQLExtension


def register_bundled(registry: ExtensionRegistry) -> None:
    registry.register(GraphQLExtension.name, GraphQLExtension)


__all__ = ["GraphQLExtension", "register_bundled"]
