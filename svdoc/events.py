"""Structural events and the event source interface.

The document assembler does not parse SystemVerilog itself.  It is fed
an ordered stream of :class:`NodeEvent` objects by a
:class:`SyntaxSource`, which wraps a real parser (see
:mod:`svdoc.slang_source`) or replays pre-built events (see
:mod:`svdoc.recorded`).

Nodes carried by events are opaque handles.  The assembler only ever
asks the source for the trimmed text of a node, for the identifier
naming a module-like node, and for the :class:`Declaration` shape of a
port, parameter or signal declaration.  The sub-node handles inside a
shape are resolved with :meth:`SyntaxSource.text` as well.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence

from .registry import Registry

# Registry for event source implementations
source_registry = Registry("source")


class Phase(enum.Enum):
    ENTER = "enter"
    LEAVE = "leave"


class NodeKind(enum.Enum):
    """Node kinds the assembler reacts to.  Sources drop everything else."""

    MODULE = "module"
    ANSI_PORT = "ansi_port"
    PORT_DECLARATION = "port_declaration"
    COMMENT = "comment"
    PARAMETER_PORT_LIST = "parameter_port_list"
    PARAMETER_DECLARATION = "parameter_declaration"
    SIGNAL_DECLARATION = "signal_declaration"
    FUNCTION = "function"
    TASK = "task"


@dataclass(frozen=True)
class NodeEvent:
    phase: Phase
    kind: NodeKind
    node: Any = None

    @classmethod
    def enter(cls, kind: NodeKind, node: Any = None) -> "NodeEvent":
        return cls(Phase.ENTER, kind, node)

    @classmethod
    def leave(cls, kind: NodeKind, node: Any = None) -> "NodeEvent":
        return cls(Phase.LEAVE, kind, node)


@dataclass
class Declarator:
    """One declared name with its unpacked dimensions and initializer."""

    name: Any
    dimensions: Any = None
    default: Any = None


@dataclass
class Declaration:
    """Sub-node handles of a port, parameter or signal declaration.

    ``declarators`` holds one entry per declared name; they all share
    ``direction`` and ``data_type``.
    """

    data_type: Any = None
    direction: Any = None
    declarators: List[Declarator] = field(default_factory=list)


class SyntaxSource(ABC):
    """Abstract producer of structural events for one source file."""

    #: Name of the file the events describe
    name: str = ""

    @classmethod
    @abstractmethod
    def from_text(
        cls,
        text: str,
        name: str = "",
        include_dirs: Sequence[str] = (),
        defines: Sequence[str] = (),
    ) -> "SyntaxSource":
        """Create a source from the contents of a file."""
        raise NotImplementedError

    @classmethod
    def from_file(
        cls,
        path: str,
        include_dirs: Sequence[str] = (),
        defines: Sequence[str] = (),
    ) -> "SyntaxSource":
        """Create a source for the file at ``path``."""
        with open(path, 'r', encoding='utf-8') as fh:
            text = fh.read()
        return cls.from_text(text, name=path, include_dirs=include_dirs, defines=defines)

    @abstractmethod
    def events(self) -> Iterator[NodeEvent]:
        """Yield enter/leave events in source order."""
        raise NotImplementedError

    @abstractmethod
    def text(self, node: Any) -> str:
        """Return the trimmed source text of a node.

        ``None`` yields an empty string and a sequence of nodes yields
        the texts of its members joined by a space.
        """
        raise NotImplementedError

    @abstractmethod
    def identifier(self, node: Any) -> Optional[str]:
        """Return the identifier naming a module, function or task node."""
        raise NotImplementedError

    @abstractmethod
    def declaration(self, kind: NodeKind, node: Any) -> Declaration:
        """Return the declaration shape of a port, parameter or signal node."""
        raise NotImplementedError

    def optional_text(self, node: Any) -> Optional[str]:
        """Like :meth:`text` but ``None`` when the text is empty."""
        value = self.text(node)
        return value or None
