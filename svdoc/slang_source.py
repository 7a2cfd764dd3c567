"""Slang-backed event source.

This module defines :class:`SlangSource`, which wraps the ``pyslang``
Python bindings of the `slang` SystemVerilog front-end.  The syntax tree
of one file is walked depth first and turned into the structural events
understood by :class:`svdoc.assembler.DocumentAssembler`.

Comments are not syntax nodes in slang; they are trivia attached to the
token that *follows* them.  A comment written right above a module,
parameter or port therefore belongs to the first token of that node.
To make sure the assembler sees such comments before the declaration
they document, the leading trivia of a documented node's first token is
emitted just before the node's enter event.

Because this source depends on compiled extensions, it raises an
:class:`ImportError` if the ``pyslang`` package cannot be imported.
There is intentionally **no** fallback parser; callers without pyslang
can feed events through :class:`svdoc.recorded.RecordedSource`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence

from .events import (
    Declaration,
    Declarator,
    NodeEvent,
    NodeKind,
    SyntaxSource,
    source_registry,
)

# Attempt to import the pyslang package.  If unavailable we set the
# imported symbols to None and creating a source raises ImportError.
try:
    import pyslang  # type: ignore[import]
    from pyslang import Bag, SourceManager  # type: ignore[import]
    from pyslang.parsing import PreprocessorOptions  # type: ignore[import]
    from pyslang.syntax import SyntaxTree  # type: ignore[import]
except Exception:
    pyslang = None  # type: ignore
    Bag = PreprocessorOptions = SourceManager = SyntaxTree = None  # type: ignore

logger = logging.getLogger(__name__)

# slang syntax kind name -> structural event kind
SYNTAX_KINDS: Dict[str, NodeKind] = {
    "ModuleDeclaration": NodeKind.MODULE,
    "ImplicitAnsiPort": NodeKind.ANSI_PORT,
    "ExplicitAnsiPort": NodeKind.ANSI_PORT,
    "FunctionPort": NodeKind.ANSI_PORT,
    "PortDeclaration": NodeKind.PORT_DECLARATION,
    "ParameterPortList": NodeKind.PARAMETER_PORT_LIST,
    "ParameterDeclaration": NodeKind.PARAMETER_DECLARATION,
    "TypeParameterDeclaration": NodeKind.PARAMETER_DECLARATION,
    "DataDeclaration": NodeKind.SIGNAL_DECLARATION,
    "NetDeclaration": NodeKind.SIGNAL_DECLARATION,
    "FunctionDeclaration": NodeKind.FUNCTION,
    "TaskDeclaration": NodeKind.TASK,
}

COMMENT_TRIVIA = ("LineComment", "BlockComment")


class Comment(NamedTuple):
    """Raw text of a comment trivia, as carried by comment events."""

    text: str


def _require_pyslang() -> None:
    if pyslang is None:
        raise ImportError(
            "pyslang is required for the SlangSource but is not installed. "
            "Install it via `pip install pyslang` and ensure build dependencies such as "
            "cmake and a C++ compiler are available."
        )


def _options(include_dirs: Sequence[str], defines: Sequence[str]) -> Any:
    ppo = PreprocessorOptions()
    ppo.predefines = list(defines)
    ppo.additionalIncludePaths = list(include_dirs)
    return Bag([ppo])


@source_registry.register("slang")
class SlangSource(SyntaxSource):
    """Produce structural events from a pyslang syntax tree."""

    def __init__(self, tree: Any, name: str = "") -> None:
        _require_pyslang()
        self.tree = tree
        self.name = name
        self._hoisted = False

    @classmethod
    def from_text(
        cls,
        text: str,
        name: str = "",
        include_dirs: Sequence[str] = (),
        defines: Sequence[str] = (),
    ) -> "SlangSource":
        _require_pyslang()
        if include_dirs or defines:
            tree = SyntaxTree.fromText(text, SourceManager(), name or "source", "",
                                       _options(include_dirs, defines))
        else:
            tree = SyntaxTree.fromText(text)
        return cls(tree, name=name)

    @classmethod
    def from_file(
        cls,
        path: str,
        include_dirs: Sequence[str] = (),
        defines: Sequence[str] = (),
    ) -> "SlangSource":
        _require_pyslang()
        sm = SourceManager()
        if include_dirs or defines:
            tree = SyntaxTree.fromFile(path, sm, _options(include_dirs, defines))
        else:
            tree = SyntaxTree.fromFile(path, sm)
        return cls(tree, name=path)

    # ------------------------------------------------------------------
    # Event generation

    def events(self) -> Iterator[NodeEvent]:
        logger.debug("walking syntax tree of %s", self.name or "<text>")
        self._hoisted = False
        yield from self._walk(self.tree.root)

    def _walk(self, node: Any) -> Iterator[NodeEvent]:
        kind = SYNTAX_KINDS.get(node.kind.name)
        if kind is not None:
            if not self._hoisted:
                yield from self._comments(node.getFirstToken())
                self._hoisted = True
            yield NodeEvent.enter(kind, node)
        for child in node:
            if child is None:
                continue
            if hasattr(child, "trivia"):
                # The first token of a documented node had its comments
                # emitted before the node's enter event
                if self._hoisted:
                    self._hoisted = False
                else:
                    yield from self._comments(child)
            else:
                yield from self._walk(child)
        if kind is not None:
            yield NodeEvent.leave(kind, node)

    def _comments(self, token: Any) -> Iterator[NodeEvent]:
        if token is None:
            return
        for trivia in token.trivia:
            if trivia.kind.name in COMMENT_TRIVIA:
                comment = Comment(trivia.getRawText())
                yield NodeEvent.enter(NodeKind.COMMENT, comment)
                yield NodeEvent.leave(NodeKind.COMMENT, comment)

    # ------------------------------------------------------------------
    # Node inspection

    def text(self, node: Any) -> str:
        if node is None:
            return ""
        if isinstance(node, Comment):
            return node.text.strip()
        if isinstance(node, (list, tuple)):
            return " ".join(t for t in (self.text(n) for n in node) if t)
        return self._clean_text(str(node))

    def identifier(self, node: Any) -> Optional[str]:
        for owner_attr in ("header", "prototype"):
            owner = getattr(node, owner_attr, None)
            if owner is not None and getattr(owner, "name", None) is not None:
                name = self.text(owner.name)
                if name:
                    return name
        return self._first_identifier(node)

    def declaration(self, kind: NodeKind, node: Any) -> Declaration:
        syntax_kind = node.kind.name
        if syntax_kind == "ExplicitAnsiPort":
            return Declaration(None, node.direction, [Declarator(node.name)])
        if syntax_kind == "FunctionPort":
            return Declaration(node.dataType, node.direction, self._declarators([node.declarator]))
        if syntax_kind in ("ImplicitAnsiPort", "PortDeclaration"):
            direction, data_type = self._split_port_header(node.header)
            if syntax_kind == "ImplicitAnsiPort":
                declarators = self._declarators([node.declarator])
            else:
                declarators = self._declarators(node.declarators)
            return Declaration(data_type, direction, declarators)
        if syntax_kind == "TypeParameterDeclaration":
            return Declaration(node.typeKeyword, None, self._declarators(node.declarators))
        if syntax_kind == "NetDeclaration":
            return Declaration((node.netType, node.type), None, self._declarators(node.declarators))
        # ParameterDeclaration and DataDeclaration
        return Declaration(node.type, None, self._declarators(node.declarators))

    # ------------------------------------------------------------------
    # Internal helpers

    def _clean_text(self, text: str) -> str:
        """Remove comments from source text and collapse whitespace."""
        text = re.sub(r"//[^\n]*", "", text)
        text = re.sub(r"/\*.*?\*/", "", text, flags=re.DOTALL)
        return " ".join(text.split())

    def _split_port_header(self, header: Any) -> tuple:
        """Return the (direction, data type) handles of a port header.

        Interface port headers (``axi_if.master bus``) have no direction;
        the whole header is used as the type.
        """
        if header is None:
            return None, None
        direction = getattr(header, "direction", None)
        if direction is None:
            return None, header
        net_type = getattr(header, "netType", None)
        data_type = getattr(header, "dataType", None)
        return direction, (net_type, data_type)

    def _declarators(self, syntax_list: Any) -> List[Declarator]:
        declarators: List[Declarator] = []
        for decl in syntax_list:
            # Skip tokens (commas, etc)
            if decl is None or not hasattr(decl, "name"):
                continue
            default = None
            initializer = getattr(decl, "initializer", None)
            if initializer is not None:
                default = getattr(initializer, "expr", None)
            assignment = getattr(decl, "assignment", None)
            if assignment is not None:
                default = getattr(assignment, "type", None)
            declarators.append(Declarator(decl.name, getattr(decl, "dimensions", None), default))
        return declarators

    def _first_identifier(self, node: Any) -> Optional[str]:
        for child in node:
            if child is None:
                continue
            if hasattr(child, "trivia"):
                if child.kind.name == "Identifier":
                    return self.text(child) or None
            else:
                found = self._first_identifier(child)
                if found:
                    return found
        return None
