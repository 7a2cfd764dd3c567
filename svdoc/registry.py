"""Decorator-based registry of pluggable implementations.

Event sources (the adapters that turn a parsed SystemVerilog file into
structural events) register themselves under a short key so that the
driver can select one by name::

    source_registry = Registry("source")

    @source_registry.register("slang")
    class SlangSource(SyntaxSource):
        ...

    source = source_registry.get("slang").from_file("top.sv")
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Map string keys to classes."""

    def __init__(self, name: str = "registry") -> None:
        """Initialize the registry.

        Args:
            name: Human-readable name used in error messages.
        """
        self._name = name
        self._items: Dict[str, Type[Any]] = {}

    def register(self, key: str) -> Callable[[Type[T]], Type[T]]:
        """Return a class decorator registering the class under ``key``.

        Raises:
            ValueError: If the key is already registered.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if key in self._items:
                raise ValueError(
                    f"{self._name}: key '{key}' already registered "
                    f"to {self._items[key].__name__}"
                )
            self._items[key] = cls
            return cls
        return decorator

    def get(self, key: str) -> Type[Any]:
        """Return the class registered under ``key``.

        Raises:
            KeyError: If the key is not registered.
        """
        if key not in self._items:
            available = ", ".join(sorted(self._items))
            raise KeyError(
                f"{self._name}: unknown key '{key}'. "
                f"Available: {available}"
            )
        return self._items[key]

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
