"""Documentation extraction driver.

:class:`DocGenerator` ties an event source to a
:class:`~svdoc.assembler.DocumentAssembler` for each input file.  The
source implementation is looked up by key in
:data:`svdoc.events.source_registry`; ``"slang"`` parses SystemVerilog
with pyslang and ``"recorded"`` replays JSON event dumps.

Files are processed one after another and share no state.  A file whose
module, function or task has no identifier is abandoned with a warning
and processing continues with the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Type

from .assembler import Diagnostic, DocumentAssembler
from .errors import MissingIdentifier
from .events import SyntaxSource, source_registry
from .model import File

# Importing the sources registers them
from . import recorded  # noqa: F401
from . import slang_source  # noqa: F401

logger = logging.getLogger(__name__)


@dataclass
class DocgenOptions:
    """Settings shared by every file a :class:`DocGenerator` processes."""

    source: str = "slang"
    include_dirs: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    strict: bool = False


class DocGenerator:
    """Extract a :class:`~svdoc.model.File` document per source file."""

    def __init__(self, options: DocgenOptions | None = None) -> None:
        self.options = options or DocgenOptions()
        self.diagnostics: List[Diagnostic] = []

    @property
    def source_class(self) -> Type[SyntaxSource]:
        return source_registry.get(self.options.source)

    def document_text(self, text: str, name: str = "") -> File:
        """Document the contents of one file.

        Raises:
            MissingIdentifier: If a module, function or task has no name.
        """
        self.diagnostics = []
        source = self.source_class.from_text(
            text, name=name, include_dirs=self.options.include_dirs, defines=self.options.defines
        )
        return self._assemble(source)

    def document_file(self, path: str) -> File:
        """Document the file at ``path``.

        Raises:
            MissingIdentifier: If a module, function or task has no name.
            OSError: If the file cannot be read.
        """
        self.diagnostics = []
        source = self.source_class.from_file(
            path, include_dirs=self.options.include_dirs, defines=self.options.defines
        )
        return self._assemble(source)

    def document_files(self, paths: Iterable[str]) -> List[File]:
        """Document several files, skipping the ones that cannot be assembled.

        ``diagnostics`` holds the entries of every file of this call.
        """
        files: List[File] = []
        diagnostics: List[Diagnostic] = []
        for path in paths:
            try:
                files.append(self.document_file(path))
            except MissingIdentifier as exc:
                logger.warning("skipping %s: %s", path, exc)
                continue
            finally:
                diagnostics.extend(self.diagnostics)
        self.diagnostics = diagnostics
        return files

    def _assemble(self, source: SyntaxSource) -> File:
        assembler = DocumentAssembler(source, strict=self.options.strict)
        try:
            return assembler.run()
        finally:
            self.diagnostics = list(assembler.diagnostics)
