"""Type name resolution.

Turns a user-supplied type name into a TypeRef plus the provider that owns
it. Strategies run in order:

1. direct   - each provider's fully qualified lookup
2. search   - each provider's search among already-available types
3. load-path - load each fallback path, then retry lookup and search
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from typeshape.exceptions import ContractViolationError, MetadataError, TypeNotFoundError
from typeshape.logging_config import logger
from typeshape.tracing import trace
from .provider import MetadataProvider
from .schemas import TypeRef


@dataclass
class Resolution:
    """A resolved type name."""
    ref: TypeRef
    provider: MetadataProvider
    strategy: str


class TypeNameResolver:
    """Resolves type names across a list of providers."""

    def __init__(self, providers: Sequence[MetadataProvider], load_paths: Optional[Sequence[Path]] = None):
        if not providers:
            raise ContractViolationError("at least one metadata provider is required")
        self.providers = list(providers)
        self.load_paths = [Path(p) for p in load_paths or []]

    @trace
    def resolve(self, name: str) -> Resolution:
        """
        Resolve ``name`` or raise TypeNotFoundError naming the strategies tried.
        """
        if not isinstance(name, str) or not name.strip():
            raise ContractViolationError("type name must be a non-empty string")
        name = name.strip()

        for provider in self.providers:
            ref = provider.lookup(name)
            if ref is not None:
                return self._found(name, ref, provider, "direct")

        for provider in self.providers:
            ref = provider.search(name)
            if ref is not None:
                return self._found(name, ref, provider, "search")

        attempted: List[str] = ["direct", "search"]
        if self.load_paths:
            attempted.append("load-path")
            resolution = self._resolve_from_paths(name)
            if resolution is not None:
                return resolution

        raise TypeNotFoundError(name, attempted)

    def _resolve_from_paths(self, name: str) -> Optional[Resolution]:
        for path in self.load_paths:
            for provider in self.providers:
                try:
                    loaded = provider.load_path(path)
                except MetadataError as e:
                    logger.warning(f"Skipping {path} for {provider.kind} provider: {e}")
                    continue
                if not loaded:
                    continue
                ref = provider.lookup(name) or provider.search(name)
                if ref is not None:
                    return self._found(name, ref, provider, "load-path")
        return None

    def _found(self, name: str, ref: TypeRef, provider: MetadataProvider, strategy: str) -> Resolution:
        logger.debug(f"Resolved '{name}' to {ref.name} via {strategy} ({provider.kind})")
        return Resolution(ref=ref, provider=provider, strategy=strategy)
