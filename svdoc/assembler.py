"""Document assembly from structural events.

:class:`DocumentAssembler` is a flat state machine over the events of a
:class:`~svdoc.events.SyntaxSource`.  It keeps an explicit stack of open
scopes: the :class:`~svdoc.model.File` is always at the bottom while
modules, functions and tasks are pushed when entered and popped when
left.  Every scope owns a buffer of annotation items that have been
parsed from comments but not yet attached to anything.

* A comment appends its folded items to the current scope's buffer.
* Entering a module (or function/task) seeds the new record with the
  buffer of the enclosing scope and clears it.
* Parameter declarations take the buffer immediately: the joined summary
  text becomes the description and the buffer is cleared.
* Signal declarations take the summary text and the remaining items,
  except ``@port``/``@param``/``@author``/``@rev`` items, which stay
  buffered for the enclosing scope.
* Port declarations leave the buffer alone.  Ports are documented by
  name with ``@port`` items, which are resolved when the scope closes.

When a scope closes, the items still buffered are added to the record.
Leftover summary text of a module or routine body (a comment on an
``assign`` or before ``endmodule``) is dropped; only the file scope
takes its leftover summary text.

Association runs once per scope, when it is closed, over the scope's
items in encounter order.  ``@brief``/leading text feeds the summary,
``@port``/``@param`` items update the first port/parameter with exactly
the same name (the last one wins) and everything else is kept on the
record for the renderer.  ``@port``/``@param`` items naming nothing are
dropped; with ``strict=True`` such mismatches are also recorded as
:class:`Diagnostic` entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Type, Union

from .comment import parse_comment
from .errors import MissingIdentifier
from .events import NodeEvent, NodeKind, Phase, SyntaxSource
from .model import (
    AnnotationItem,
    Author,
    File,
    FunctionOrTask,
    Module,
    Parameter,
    ParamDoc,
    Port,
    PortDoc,
    Revision,
    Signal,
    StateDoc,
    StateMachineStart,
    Summary,
    Transition,
    joined_summary,
    packed_width,
)

logger = logging.getLogger(__name__)

Record = Union[File, Module, FunctionOrTask]

# Items resolved by the association of the enclosing scope
SCOPE_ITEMS = (PortDoc, ParamDoc, Author, Revision)


@dataclass
class Diagnostic:
    """A non-fatal association problem reported in strict mode."""

    kind: str
    message: str
    scope: str

    def __str__(self) -> str:
        return f"{self.scope}: {self.message}"


@dataclass
class Scope:
    """An open structural element and its buffer of unattached items."""

    record: Record
    pending: List[AnnotationItem] = field(default_factory=list)


class DocumentAssembler:
    """Build a :class:`~svdoc.model.File` from the events of one source.

    Args:
        source: Event source for a single file.
        file_name: Name recorded on the resulting file.  Defaults to
            ``source.name``.
        strict: Record :class:`Diagnostic` entries for documentation that
            cannot be associated.  The resulting document is the same.
    """

    def __init__(self, source: SyntaxSource, file_name: Optional[str] = None, strict: bool = False) -> None:
        self.source = source
        self.strict = strict
        self.diagnostics: List[Diagnostic] = []
        self._file = File(name=file_name if file_name is not None else source.name)
        self._stack: List[Scope] = [Scope(self._file)]
        self._finished = False
        self._handlers: Dict[Tuple[Phase, NodeKind], Callable[[NodeEvent], None]] = {
            (Phase.ENTER, NodeKind.COMMENT): self._on_comment,
            (Phase.ENTER, NodeKind.MODULE): self._enter_module,
            (Phase.LEAVE, NodeKind.MODULE): self._leave_module,
            (Phase.ENTER, NodeKind.ANSI_PORT): self._on_port,
            (Phase.ENTER, NodeKind.PORT_DECLARATION): self._on_port,
            (Phase.ENTER, NodeKind.PARAMETER_DECLARATION): self._on_parameter,
            (Phase.ENTER, NodeKind.SIGNAL_DECLARATION): self._on_signal,
            (Phase.ENTER, NodeKind.FUNCTION): self._enter_routine,
            (Phase.LEAVE, NodeKind.FUNCTION): self._leave_routine,
            (Phase.ENTER, NodeKind.TASK): self._enter_routine,
            (Phase.LEAVE, NodeKind.TASK): self._leave_routine,
        }

    # ------------------------------------------------------------------
    # Driving

    def run(self) -> File:
        """Consume every event of the source and return the finished file.

        Raises:
            MissingIdentifier: If a module, function or task has no name.
        """
        for event in self.source.events():
            self.feed(event)
        return self.finish()

    def feed(self, event: NodeEvent) -> None:
        """Process a single event.  Unknown node kinds are ignored."""
        handler = self._handlers.get((event.phase, event.kind))
        if handler is not None:
            handler(event)

    def finish(self) -> File:
        """Close any scope left open and associate the file's own items."""
        if self._finished:
            return self._file
        while len(self._stack) > 1:
            logger.debug("closing unterminated %s", self._stack[-1].record)
            self._close_top()
        self._associate(self._stack[0])
        self._finished = True
        return self._file

    @property
    def depth(self) -> int:
        """Number of open scopes above the file scope."""
        return len(self._stack) - 1

    @property
    def current(self) -> Scope:
        return self._stack[-1]

    # ------------------------------------------------------------------
    # Event handlers

    def _on_comment(self, event: NodeEvent) -> None:
        items = parse_comment(self.source.text(event.node))
        self.current.pending.extend(items)

    def _enter_module(self, event: NodeEvent) -> None:
        name = self._identifier(event)
        self._push(Module(name=name))

    def _leave_module(self, event: NodeEvent) -> None:
        self._leave(Module)

    def _enter_routine(self, event: NodeEvent) -> None:
        name = self._identifier(event)
        self._push(FunctionOrTask(name=name, is_function=event.kind is NodeKind.FUNCTION))

    def _leave_routine(self, event: NodeEvent) -> None:
        self._leave(FunctionOrTask)

    def _on_port(self, event: NodeEvent) -> None:
        decl = self.source.declaration(event.kind, event.node)
        direction = self.source.optional_text(decl.direction)
        port_type = self.source.optional_text(decl.data_type)
        owner = self._owner()
        for d in decl.declarators:
            port = Port(
                name=self.source.text(d.name),
                port_type=port_type,
                direction=direction,
                dimensions=self.source.optional_text(d.dimensions),
            )
            if owner is None:
                logger.debug("dropping port %s declared outside a module", port.name)
                continue
            owner.ports.append(port)

    def _on_parameter(self, event: NodeEvent) -> None:
        decl = self.source.declaration(event.kind, event.node)
        param_type = self.source.optional_text(decl.data_type)
        description = joined_summary(self.current.pending)
        owner = self._owner()
        for d in decl.declarators:
            param = Parameter(
                name=self.source.text(d.name),
                param_type=param_type,
                default=self.source.optional_text(d.default),
                dimensions=self.source.optional_text(d.dimensions),
                description=description,
            )
            if owner is None:
                logger.debug("dropping parameter %s declared outside a module", param.name)
                continue
            owner.parameters.append(param)
        self.current.pending.clear()

    def _on_signal(self, event: NodeEvent) -> None:
        decl = self.source.declaration(event.kind, event.node)
        signal_type = self.source.optional_text(decl.data_type)
        pending = self.current.pending
        summary = joined_summary(pending) or None
        items = [item for item in pending if not isinstance(item, (Summary,) + SCOPE_ITEMS)]
        owner = self._owner()
        if owner is None:
            logger.debug("dropping signal declaration outside a module")
        else:
            for d in decl.declarators:
                owner.signals.append(Signal(
                    name=self.source.text(d.name),
                    summary=summary,
                    signal_type=signal_type,
                    width=packed_width(signal_type),
                    dimensions=self.source.optional_text(d.dimensions),
                    items=list(items),
                ))
        # Items documenting the enclosing scope wait for its association
        self.current.pending = [item for item in pending if isinstance(item, SCOPE_ITEMS)]

    # ------------------------------------------------------------------
    # Scope handling

    def _identifier(self, event: NodeEvent) -> str:
        name = self.source.identifier(event.node)
        if not name:
            raise MissingIdentifier(event.kind.value, self.source.name)
        return name

    def _push(self, record: Union[Module, FunctionOrTask]) -> None:
        parent = self.current
        record.items.extend(parent.pending)
        parent.pending.clear()
        self._stack.append(Scope(record))
        logger.debug("enter %s (depth %d)", record, self.depth)

    def _leave(self, record_type: Type[Record]) -> None:
        if self.depth == 0 or not isinstance(self.current.record, record_type):
            logger.debug("ignoring unbalanced leave of %s", record_type.__name__)
            return
        self._close_top()

    def _close_top(self) -> None:
        scope = self._stack.pop()
        record = scope.record
        self._associate(scope)
        logger.debug("leave %s", record)
        if isinstance(record, Module):
            self._file.modules.append(record)
            return
        module = self._innermost(Module)
        if module is None:
            logger.debug("dropping %s declared outside a module", record)
        else:
            module.tasks.append(record)

    def _innermost(self, *types: type) -> Optional[Union[Module, FunctionOrTask]]:
        for scope in reversed(self._stack):
            if isinstance(scope.record, types):
                return scope.record
        return None

    def _owner(self) -> Optional[Union[Module, FunctionOrTask]]:
        return self._innermost(Module, FunctionOrTask)

    # ------------------------------------------------------------------
    # Association

    def _associate(self, scope: Scope) -> None:
        record = scope.record
        # Whatever is still buffered when the scope closes belongs to it,
        # except body text of a module or routine, which is not its summary
        for item in scope.pending:
            if isinstance(item, Summary) and not isinstance(record, File):
                logger.debug("dropping unattached text in %s: %r", record, item.text)
                continue
            record.items.append(item)
        scope.pending = []
        summary: List[str] = []
        authors: List[str] = []
        remaining: List[AnnotationItem] = []
        in_fsm = False
        for item in record.items:
            if isinstance(item, Summary):
                summary.append(item.text)
            elif isinstance(item, PortDoc):
                self._document(record, "ports", item, "unmatched-port-doc")
            elif isinstance(item, ParamDoc):
                self._document(record, "parameters", item, "unmatched-param-doc")
            elif isinstance(record, File) and isinstance(item, Author):
                authors.append(item.text)
            elif isinstance(record, File) and isinstance(item, Revision):
                record.revisions.append(item)
            else:
                if isinstance(item, StateMachineStart):
                    in_fsm = True
                elif isinstance(item, (StateDoc, Transition)) and not in_fsm:
                    self._report("orphan-state-item", f"{type(item).__name__} outside of an @fsm group", record)
                remaining.append(item)
        record.items = remaining
        text = "\n".join(summary)
        if isinstance(record, Module):
            record.summary = text if summary else None
        else:
            record.summary = text
        if isinstance(record, File):
            record.author = "\n".join(authors)

    def _document(self, record: Record, attr: str, item: Union[PortDoc, ParamDoc], kind: str) -> None:
        for target in getattr(record, attr, ()):
            if target.name == item.name:
                target.description = item.text
                return
        self._report(kind, f"no {attr[:-1]} named '{item.name}'", record)

    def _report(self, kind: str, message: str, record: Record) -> None:
        logger.debug("%s: %s", record, message)
        if self.strict:
            self.diagnostics.append(Diagnostic(kind, message, str(record)))
