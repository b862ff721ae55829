"""Name based lookup of classes."""

from typing import Generic, TypeVar

from .exceptions import RegistryError, RepeatedIdError

T = TypeVar("T")


class Registry(Generic[T]):
    """Classes indexed by their name and, optionally, by aliases such as file extensions.

    :param name: the registry name, used in error messages.

    """

    def __init__(self, name: str):
        self.name = name
        self._entries: dict[str, type[T]] = dict()

    def __contains__(self, id_: str) -> bool:
        return id_ in self._entries

    def get(self, id_: str) -> type[T]:
        """Retrieve a class by name or alias.

        :raises RegistryError: if no class was registered with this name.
        """
        entry = self._entries.get(id_)
        if entry is None:
            raise RegistryError(f"`{id_}` not found in {self.name} registry.")
        return entry

    def list_entries(self) -> list[str]:
        """List all registered names and aliases."""
        return sorted(self._entries)

    def register(self, entry: type[T]) -> type[T]:
        """Add a class using its name. Meant to be used as a class decorator."""
        self._add(entry.__name__, entry)
        return entry

    def add_alias(self, alias: str, id_: str) -> None:
        """Make a registered class available under another name."""
        self._add(alias, self.get(id_))

    def _add(self, id_: str, entry: type[T]) -> None:
        if id_ in self._entries:
            raise RepeatedIdError(id_)
        self._entries[id_] = entry
