"""Replay of pre-built structural events.

:class:`RecordedSource` holds a list of events over plain text nodes.
It lets a caller drive the assembler from any parser (tree-sitter,
verible, a hand-written scanner) without a pyslang dependency, either
through the builder methods::

    src = RecordedSource(name="counter.sv")
    src.comment("//* @brief Free running counter")
    src.enter_module("counter")
    src.ansi_port("clk", direction="input", data_type="logic")
    src.parameter("WIDTH", default="8", data_type="int")
    src.leave_module()

or by loading a JSON dump of the same events (see :meth:`from_text`)::

    [
      {"phase": "enter", "kind": "comment", "node": {"text": "//* @brief ..."}},
      {"phase": "enter", "kind": "module", "node": {"identifier": "counter"}},
      {"phase": "enter", "kind": "ansi_port",
       "node": {"declaration": {"direction": "input", "data_type": "logic",
                                "declarators": [{"name": "clk"}]}}},
      {"phase": "leave", "kind": "module"}
    ]
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

from .events import (
    Declaration,
    Declarator,
    NodeEvent,
    NodeKind,
    Phase,
    SyntaxSource,
    source_registry,
)

Names = Union[str, Sequence[str]]


@dataclass(frozen=True)
class TextNode:
    """A node whose text, identifier and declaration shape are known."""

    text: str = ""
    identifier: Optional[str] = None
    declaration: Optional[Declaration] = None


@source_registry.register("recorded")
class RecordedSource(SyntaxSource):
    """Event source replaying an in-memory list of events."""

    def __init__(self, events: Iterable[NodeEvent] = (), name: str = "") -> None:
        self.name = name
        self._events: List[NodeEvent] = list(events)

    @classmethod
    def from_text(
        cls,
        text: str,
        name: str = "",
        include_dirs: Sequence[str] = (),
        defines: Sequence[str] = (),
    ) -> "RecordedSource":
        """Load events from a JSON array.

        Raises:
            ValueError: If the JSON is malformed or names an unknown
                phase or node kind.
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{name or '<text>'}: invalid event dump: {exc}") from exc
        if not isinstance(raw, list):
            raise ValueError(f"{name or '<text>'}: event dump must be a JSON array")
        return cls((_event_from_dict(entry) for entry in raw), name=name)

    # ------------------------------------------------------------------
    # SyntaxSource interface

    def events(self) -> Iterator[NodeEvent]:
        return iter(self._events)

    def text(self, node: Any) -> str:
        if node is None:
            return ""
        if isinstance(node, TextNode):
            return node.text.strip()
        if isinstance(node, str):
            return node.strip()
        if isinstance(node, (list, tuple)):
            return " ".join(t for t in (self.text(n) for n in node) if t)
        return str(node).strip()

    def identifier(self, node: Any) -> Optional[str]:
        if isinstance(node, TextNode):
            return node.identifier
        return None

    def declaration(self, kind: NodeKind, node: Any) -> Declaration:
        if isinstance(node, TextNode) and node.declaration is not None:
            return node.declaration
        return Declaration()

    # ------------------------------------------------------------------
    # Builder helpers

    def add(self, phase: Phase, kind: NodeKind, node: Any = None) -> "RecordedSource":
        self._events.append(NodeEvent(phase, kind, node))
        return self

    def comment(self, text: str) -> "RecordedSource":
        return self.add(Phase.ENTER, NodeKind.COMMENT, TextNode(text)).add(Phase.LEAVE, NodeKind.COMMENT)

    def enter_module(self, name: Optional[str]) -> "RecordedSource":
        return self.add(Phase.ENTER, NodeKind.MODULE, TextNode(identifier=name))

    def leave_module(self) -> "RecordedSource":
        return self.add(Phase.LEAVE, NodeKind.MODULE)

    def enter_function(self, name: Optional[str], task: bool = False) -> "RecordedSource":
        kind = NodeKind.TASK if task else NodeKind.FUNCTION
        return self.add(Phase.ENTER, kind, TextNode(identifier=name))

    def leave_function(self, task: bool = False) -> "RecordedSource":
        return self.add(Phase.LEAVE, NodeKind.TASK if task else NodeKind.FUNCTION)

    def ansi_port(self, name: str, direction: Optional[str] = None, data_type: Optional[str] = None,
                  dimensions: Optional[str] = None) -> "RecordedSource":
        decl = Declaration(data_type, direction, [Declarator(name, dimensions)])
        return self._declare(NodeKind.ANSI_PORT, decl)

    def port_declaration(self, names: Names, direction: Optional[str] = None, data_type: Optional[str] = None,
                         dimensions: Optional[Sequence[Optional[str]]] = None) -> "RecordedSource":
        decl = Declaration(data_type, direction, _declarators(names, dimensions))
        return self._declare(NodeKind.PORT_DECLARATION, decl)

    def parameter(self, names: Names, default: Optional[str] = None, data_type: Optional[str] = None,
                  dimensions: Optional[str] = None) -> "RecordedSource":
        if isinstance(names, str):
            names = [names]
        decl = Declaration(data_type, None, [Declarator(n, dimensions, default) for n in names])
        return self._declare(NodeKind.PARAMETER_DECLARATION, decl)

    def signal(self, names: Names, data_type: Optional[str] = None,
               dimensions: Optional[Sequence[Optional[str]]] = None) -> "RecordedSource":
        decl = Declaration(data_type, None, _declarators(names, dimensions))
        return self._declare(NodeKind.SIGNAL_DECLARATION, decl)

    def _declare(self, kind: NodeKind, decl: Declaration) -> "RecordedSource":
        return self.add(Phase.ENTER, kind, TextNode(declaration=decl)).add(Phase.LEAVE, kind)


def _declarators(names: Names, dimensions: Optional[Sequence[Optional[str]]]) -> List[Declarator]:
    if isinstance(names, str):
        names = [names]
    dims = list(dimensions or [])
    dims += [None] * (len(names) - len(dims))
    return [Declarator(n, d) for n, d in zip(names, dims)]


def _event_from_dict(entry: Dict[str, Any]) -> NodeEvent:
    try:
        phase = Phase(entry["phase"])
        kind = NodeKind(entry["kind"])
    except (KeyError, ValueError) as exc:
        raise ValueError(f"invalid event {entry!r}: {exc}") from exc
    node = entry.get("node")
    if node is None:
        return NodeEvent(phase, kind)
    decl = node.get("declaration")
    if decl is not None:
        decl = Declaration(
            data_type=decl.get("data_type"),
            direction=decl.get("direction"),
            declarators=[
                Declarator(d["name"], d.get("dimensions"), d.get("default"))
                for d in decl.get("declarators", [])
            ],
        )
    return NodeEvent(phase, kind, TextNode(node.get("text", ""), node.get("identifier"), decl))
