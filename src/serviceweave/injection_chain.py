from __future__ import annotations

from dataclasses import dataclass, field

from typing_extensions import Self

from serviceweave.identifiers import Identifier, identifier_name


@dataclass(slots=True)
class InjectionChain:
    """Trace of what a single ``make()`` call has resolved so far.

    The chain keeps the identifier keys that ended a binding lookup, in order,
    so the deepest concrete class can be reported. Resolutions hold every key
    visited, bound or not, and are what circular reference detection checks
    against.
    """

    _chain: list[Identifier] = field(default_factory=list)
    _resolutions: set[Identifier] = field(default_factory=set)

    def add_to_chain(self, identifier: Identifier) -> Self:
        self._chain.append(identifier)
        return self

    def add_resolution(self, identifier: Identifier) -> Self:
        self._resolutions.add(identifier)
        return self

    def has_resolution(self, identifier: Identifier) -> bool:
        return identifier in self._resolutions

    def current_target(self) -> Identifier:
        """Return the last identifier pushed to the chain.

        Raises:
            RuntimeError: If nothing was resolved yet.

        """
        if not self._chain:
            msg = "Access to injection chain before any resolution was made."
            raise RuntimeError(msg)
        return self._chain[-1]

    @property
    def chain(self) -> list[str]:
        """Dotted names of the chain, deepest first."""
        return [identifier_name(identifier) for identifier in reversed(self._chain)]

    def branch(self) -> InjectionChain:
        """Return a copy used to resolve one constructor parameter subtree."""
        return InjectionChain(list(self._chain), set(self._resolutions))
