"""Top level package for the SystemVerilog documentation extractor.

This package extracts structured documentation from annotation comments
(``//* ...`` and ``/** ... */``) embedded in SystemVerilog sources and
assembles it into a hierarchical document model that a renderer can
consume.

Key concepts:

* **Model classes** represent annotation items and the documented
  design elements (files, modules, ports, parameters, signals, tasks).
  See :mod:`svdoc.model`.
* **Comment parser** turns one annotation comment into folded items.
  See :mod:`svdoc.comment`.
* **Event sources** walk a parsed file and emit structural events.
  pyslang is used for parsing.  See :mod:`svdoc.slang_source` and
  :mod:`svdoc.recorded`.
* **Assembler** builds the document from the events.
  See :mod:`svdoc.assembler`.
* **Registry** enables decorator-based source registration.
  See :mod:`svdoc.registry`.
"""

from .model import (
    AnnotationItem,
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
    Port,
    Parameter,
    Signal,
    State,
    StateMachine,
    FunctionOrTask,
    Module,
    File,
    group_state_machines,
)
from .comment import fold, parse_annotation, parse_comment, parse_lines
from .errors import DocgenError, MissingIdentifier, UnparsableComment
from .events import Declaration, Declarator, NodeEvent, NodeKind, Phase, SyntaxSource, source_registry
from .assembler import Diagnostic, DocumentAssembler
from .recorded import RecordedSource
from .slang_source import SlangSource  # noqa: F401
from .registry import Registry
from .docgen import DocGenerator, DocgenOptions

__all__ = [
    "AnnotationItem",
    "Plain",
    "Summary",
    "Note",
    "CrossRef",
    "SeeAlso",
    "Example",
    "Waveform",
    "Author",
    "Revision",
    "PortDoc",
    "ParamDoc",
    "Return",
    "StateMachineStart",
    "StateDoc",
    "Transition",
    "Port",
    "Parameter",
    "Signal",
    "State",
    "StateMachine",
    "FunctionOrTask",
    "Module",
    "File",
    "group_state_machines",
    "fold",
    "parse_annotation",
    "parse_comment",
    "parse_lines",
    "DocgenError",
    "MissingIdentifier",
    "UnparsableComment",
    "Declaration",
    "Declarator",
    "NodeEvent",
    "NodeKind",
    "Phase",
    "SyntaxSource",
    "source_registry",
    "Diagnostic",
    "DocumentAssembler",
    "RecordedSource",
    "SlangSource",
    "Registry",
    "DocGenerator",
    "DocgenOptions",
]
