"""Document model for SystemVerilog annotation comments.

This module defines the classes produced by the documentation
extractor.  There are two families:

* **Annotation items** represent a single parsed unit of an annotation
  comment (``@brief``, ``@port clk ...``, a bare line of text, ...).
  They form a closed set of small dataclasses deriving from
  :class:`AnnotationItem`; every variant carries one growable text
  payload and the pair-shaped variants also carry a fixed name.
* **Structural records** (:class:`Port`, :class:`Parameter`,
  :class:`Signal`, :class:`FunctionOrTask`, :class:`Module` and
  :class:`File`) describe the design elements the annotations are
  attached to.  They are created and mutated by
  :class:`svdoc.assembler.DocumentAssembler` and handed to a renderer
  once complete.

State machines are not resolved while a file is assembled.  The raw
``@fsm``/``@state``/transition items stay in the owning record and
:func:`group_state_machines` turns them into :class:`StateMachine`
objects on demand.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Type

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Annotation items


class AnnotationItem:
    """Base class of every annotation item variant.

    Variants are dataclasses declaring a ``text`` field; pair-shaped
    variants declare their name field(s) first.
    """

    text: str

    def append(self, text: str) -> None:
        """Extend the text payload of this item."""
        self.text += text


@dataclass
class _TextItem(AnnotationItem):
    text: str = ""


@dataclass
class Plain(_TextItem):
    """A line of free text that did not start with a tag."""


@dataclass
class Summary(_TextItem):
    """``@brief`` text, or a leading untagged paragraph."""


@dataclass
class Note(_TextItem):
    """``@note`` text."""


@dataclass
class CrossRef(_TextItem):
    """``@ref`` text."""


@dataclass
class SeeAlso(_TextItem):
    """``@see`` text."""


@dataclass
class Example(_TextItem):
    """``@example`` text."""


@dataclass
class Waveform(_TextItem):
    """``@wave`` text; holds a waveform description for a diagram tool."""


@dataclass
class Author(_TextItem):
    """``@author`` text."""


@dataclass
class Return(_TextItem):
    """``@return`` text of a function."""


@dataclass
class StateMachineStart(_TextItem):
    """``@fsm`` text; opens a state machine group."""


@dataclass
class Revision(AnnotationItem):
    """``@rev <name> <text>``."""

    name: str
    text: str = ""


@dataclass
class PortDoc(AnnotationItem):
    """``@port <name> <text>``; documents a port by name."""

    name: str
    text: str = ""


@dataclass
class ParamDoc(AnnotationItem):
    """``@param <name> <text>``; documents a parameter by name."""

    name: str
    text: str = ""


@dataclass
class StateDoc(AnnotationItem):
    """``@state <name> <text>``; documents a state of the current FSM."""

    name: str
    text: str = ""


@dataclass
class Transition(AnnotationItem):
    """``@<source> -> <target> <text>``; a state transition."""

    source: str
    target: str
    text: str = ""


ANNOTATION_ITEM_TYPES: Tuple[Type[AnnotationItem], ...] = (
    Plain,
    Summary,
    Note,
    CrossRef,
    SeeAlso,
    Example,
    Waveform,
    Author,
    Revision,
    PortDoc,
    ParamDoc,
    Return,
    StateMachineStart,
    StateDoc,
    Transition,
)


def joined_summary(items: Iterable[AnnotationItem]) -> str:
    """Join the text of every :class:`Summary` item with newlines."""
    return "\n".join(item.text for item in items if isinstance(item, Summary))


def packed_width(type_text: Optional[str]) -> Optional[int]:
    """Return the bit width described by the packed range of a type.

    Only simple numeric ranges of the form ``[msb:lsb]`` are understood;
    anything else (parameterised ranges, multiple packed dimensions or no
    range at all) yields ``None``.
    """
    if not type_text:
        return None
    ranges = re.findall(r"\[[^\]]*\]", type_text)
    if len(ranges) != 1:
        return None
    m = re.match(r"\[\s*(?P<msb>-?\d+)\s*:\s*(?P<lsb>-?\d+)\s*\]", ranges[0])
    if not m:
        return None
    return abs(int(m.group('msb')) - int(m.group('lsb'))) + 1


# ----------------------------------------------------------------------
# Structural records


@dataclass
class Port:
    """Represents a module, function or task port."""

    name: str
    port_type: Optional[str] = None
    direction: Optional[str] = None
    dimensions: Optional[str] = None
    description: str = ""

    def __str__(self) -> str:
        parts = [p for p in (self.direction, self.port_type, self.name, self.dimensions) if p]
        return " ".join(parts)


@dataclass
class Parameter:
    """Represents a parameter or localparam assignment."""

    name: str
    param_type: Optional[str] = None
    default: Optional[str] = None
    dimensions: Optional[str] = None
    description: str = ""

    def __str__(self) -> str:
        parts = ["parameter"]
        if self.param_type:
            parts.append(self.param_type)
        parts.append(self.name)
        if self.default is not None:
            parts.extend(["=", self.default])
        return " ".join(parts)


@dataclass
class Signal:
    """Represents a net or variable declared inside a module or task."""

    name: str
    summary: Optional[str] = None
    signal_type: Optional[str] = None
    width: Optional[int] = None
    dimensions: Optional[str] = None
    items: List[AnnotationItem] = field(default_factory=list)


@dataclass
class State:
    """A single state of a documented state machine."""

    name: str
    transitions: Dict[str, str] = field(default_factory=dict)
    items: List[AnnotationItem] = field(default_factory=list)


@dataclass
class StateMachine:
    """A state machine described by an ``@fsm`` group of annotations."""

    name: str
    summary: Optional[str] = None
    states: List[State] = field(default_factory=list)

    def get_state(self, name: str) -> Optional[State]:
        for s in self.states:
            if s.name == name:
                return s
        return None

    def _state(self, name: str) -> State:
        state = self.get_state(name)
        if state is None:
            state = State(name)
            self.states.append(state)
        return state


@dataclass
class FunctionOrTask:
    """Represents a function or task declaration."""

    name: str
    is_function: bool = True
    summary: str = ""
    ports: List[Port] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    items: List[AnnotationItem] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{'function' if self.is_function else 'task'} {self.name}"


@dataclass
class Module:
    """Represents a documented SystemVerilog module.

    ``items`` holds the annotation items that were not consumed by
    association (summaries and port/parameter documentation are moved
    into the corresponding fields when the module is closed).
    """

    name: str
    summary: Optional[str] = None
    ports: List[Port] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    signals: List[Signal] = field(default_factory=list)
    tasks: List[FunctionOrTask] = field(default_factory=list)
    items: List[AnnotationItem] = field(default_factory=list)

    def get_port(self, name: str) -> Optional[Port]:
        for p in self.ports:
            if p.name == name:
                return p
        return None

    def get_parameter(self, name: str) -> Optional[Parameter]:
        for g in self.parameters:
            if g.name == name:
                return g
        return None

    def get_signal(self, name: str) -> Optional[Signal]:
        for s in self.signals:
            if s.name == name:
                return s
        return None

    @property
    def state_machines(self) -> List[StateMachine]:
        """State machines documented in this module.

        The module's own items are grouped first, followed by the items
        attached to each signal (FSM comments usually precede the state
        register declaration).
        """
        machines = group_state_machines(self.items)
        for sig in self.signals:
            machines.extend(group_state_machines(sig.items))
        return machines

    def __str__(self) -> str:
        return f"module {self.name}"


@dataclass
class File:
    """Top level record for one source file."""

    name: str
    summary: str = ""
    author: str = ""
    revisions: List[Revision] = field(default_factory=list)
    modules: List[Module] = field(default_factory=list)
    items: List[AnnotationItem] = field(default_factory=list)

    def get_module(self, name: str) -> Optional[Module]:
        for m in self.modules:
            if m.name == name:
                return m
        return None

    def __str__(self) -> str:
        return f"file {self.name}"


def group_state_machines(items: Iterable[AnnotationItem]) -> List[StateMachine]:
    """Group FSM annotation items into :class:`StateMachine` objects.

    A :class:`StateMachineStart` opens a new machine; every following
    :class:`StateDoc` and :class:`Transition` belongs to it until the next
    start.  The first line of the ``@fsm`` text names the machine and the
    remaining lines form its summary.  State items seen before any
    ``@fsm`` are ignored.
    """
    machines: List[StateMachine] = []
    current: Optional[StateMachine] = None
    for item in items:
        if isinstance(item, StateMachineStart):
            name, _, rest = item.text.strip().partition("\n")
            current = StateMachine(name.strip(), summary=rest.strip() or None)
            machines.append(current)
        elif isinstance(item, (StateDoc, Transition)):
            if current is None:
                logger.debug("ignoring %s outside of an @fsm group", type(item).__name__)
                continue
            if isinstance(item, StateDoc):
                current._state(item.name).items.append(item)
            else:
                current._state(item.source).transitions[item.target] = item.text
                current._state(item.target)
    return machines
