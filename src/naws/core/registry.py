"""Domain registry and command dispatcher.

Each AWS domain contributes one immutable :class:`DomainDescriptor` at
start-up.  The registry is built explicitly, frozen, and then handed to
the CLI — it is never a hidden global.  Registration order is display
order.  After :meth:`Registry.freeze` the registry is read-only, so
dispatch and completion can read it without locking.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from naws.exceptions import RegistryError, UnknownCommandError

Handler = Callable[[Sequence[str]], int]
"""A subcommand handler: free arguments in, process exit code out."""


@dataclass(frozen=True, slots=True)
class SubcommandDescriptor:
    name: str
    description: str
    handler: Handler


@dataclass(frozen=True, slots=True)
class DomainDescriptor:
    """Immutable registration record for one domain."""

    name: str
    description: str
    subcommands: tuple[SubcommandDescriptor, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "subcommands", tuple(self.subcommands))
        names = [sub.name for sub in self.subcommands]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise RegistryError(
                f"Domain '{self.name}' declares duplicate subcommands: "
                + ", ".join(duplicates),
            )

    def subcommand(self, name: str) -> SubcommandDescriptor | None:
        return next((sub for sub in self.subcommands if sub.name == name), None)


class Registry:
    """Append-only, then frozen, table of domains."""

    def __init__(self, domains: Iterable[DomainDescriptor] = ()) -> None:
        self._domains: dict[str, DomainDescriptor] = {}
        self._frozen = False
        for domain in domains:
            self.register(domain)

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def register(self, domain: DomainDescriptor) -> None:
        """Add *domain*; each name may be registered exactly once."""
        if self._frozen:
            raise RegistryError(
                f"Cannot register '{domain.name}': the registry is frozen.",
            )
        if domain.name in self._domains:
            raise RegistryError(f"Domain '{domain.name}' is already registered.")
        self._domains[domain.name] = domain

    def freeze(self) -> Registry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def list_domains(self) -> list[str]:
        return list(self._domains)

    def list_subcommands(self, domain_name: str) -> list[str]:
        return [sub.name for sub in self.get(domain_name).subcommands]

    def get(self, domain_name: str) -> DomainDescriptor:
        """Return the domain named exactly *domain_name*.

        Raises
        ------
        UnknownCommandError
            When no such domain is registered.
        """
        domain = self._domains.get(domain_name)
        if domain is None:
            raise UnknownCommandError(
                f"Unknown domain: {domain_name}",
                hint="Available domains: " + ", ".join(self.list_domains()),
            )
        return domain

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        domain_name: str,
        subcommand_name: str,
        args: Sequence[str] = (),
    ) -> int:
        """Invoke the handler bound to ``(domain_name, subcommand_name)``.

        Nothing is invoked when either name is unknown.

        Raises
        ------
        UnknownCommandError
            For an unknown domain or subcommand.
        """
        domain = self.get(domain_name)
        sub = domain.subcommand(subcommand_name)
        if sub is None:
            raise UnknownCommandError(
                f"Unknown {domain_name} command: {subcommand_name}",
                hint="Available commands: "
                + ", ".join(self.list_subcommands(domain_name)),
            )
        logger.debug("Dispatching {} {} {}", domain_name, subcommand_name, list(args))
        return sub.handler(list(args))
