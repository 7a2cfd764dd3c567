"""Annotation comment grammar.

Annotation comments are ordinary SystemVerilog comments that start with
an extra asterisk::

    //* @brief One line annotation

    /**
     * @brief Counter with synchronous reset
     * The counter wraps around at ``MAX``.
     * @port clk  Clock input
     * @param MAX: Terminal count
     */

Each physical line of the comment body is parsed on its own.  The
alternatives below are tried in order and the first one that matches
wins:

1. a simple tag (``@brief``, ``@note``, ...) followed by a space or a
   colon, the rest of the line being the payload;
2. a named tag (``@rev``, ``@port``, ``@param``, ``@state``) followed by
   a space, an identifier and a space or colon;
3. a state transition ``@<from> -> <to>`` followed by a space or colon;
4. anything else is :class:`~svdoc.model.Plain` text.

:func:`fold` then merges plain lines into the preceding tagged item so
that a description may span several lines.  An untagged leading
paragraph becomes the summary.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Callable, Dict, Iterable, List, Optional

from .errors import UnparsableComment
from .model import (
    AnnotationItem,
    Author,
    CrossRef,
    Example,
    Note,
    ParamDoc,
    Plain,
    PortDoc,
    Return,
    Revision,
    SeeAlso,
    StateDoc,
    StateMachineStart,
    Summary,
    Transition,
    Waveform,
)

logger = logging.getLogger(__name__)

LINE_COMMENT_START = "//*"
BLOCK_COMMENT_START = "/**"
BLOCK_COMMENT_END = "*/"

IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_$]*"

# Tag keyword -> item constructor, in the order the alternatives are tried
SIMPLE_TAGS: Dict[str, Callable[[str], AnnotationItem]] = {
    "brief": Summary,
    "note": Note,
    "ref": CrossRef,
    "see": SeeAlso,
    "example": Example,
    "wave": Waveform,
    "author": Author,
    "return": Return,
    "fsm": StateMachineStart,
}

NAMED_TAGS: Dict[str, Callable[[str, str], AnnotationItem]] = {
    "rev": Revision,
    "port": PortDoc,
    "param": ParamDoc,
    "state": StateDoc,
}

MARKER_RE = re.compile(r"^\s*(?:\*\s*)?")

SIMPLE_TAG_RE = re.compile(
    r"^@(?P<tag>" + "|".join(SIMPLE_TAGS) + r")[ :](?P<text>.*)$"
)

NAMED_TAG_RE = re.compile(
    r"^@(?P<tag>" + "|".join(NAMED_TAGS) + r") "
    r"(?P<name>" + IDENTIFIER + r")[ :](?P<text>.*)$"
)

TRANSITION_RE = re.compile(
    r"^@(?P<source>" + IDENTIFIER + r")\s*->\s*"
    r"(?P<target>" + IDENTIFIER + r")[ :](?P<text>.*)$"
)


def parse_line(line: str) -> Optional[AnnotationItem]:
    """Parse one physical line of an annotation comment.

    Returns ``None`` for lines that are empty once the continuation
    marker has been removed.
    """
    line = MARKER_RE.sub("", line, count=1)
    if not line.strip():
        return None

    m = SIMPLE_TAG_RE.match(line)
    if m:
        return SIMPLE_TAGS[m.group("tag")](m.group("text").rstrip())

    m = NAMED_TAG_RE.match(line)
    if m:
        return NAMED_TAGS[m.group("tag")](m.group("name"), m.group("text").rstrip())

    m = TRANSITION_RE.match(line)
    if m:
        return Transition(m.group("source"), m.group("target"), m.group("text").rstrip())

    return Plain(line.rstrip())


def parse_lines(body: str) -> List[AnnotationItem]:
    """Parse a comment body (delimiters already removed) line by line."""
    items: List[AnnotationItem] = []
    for line in body.splitlines():
        item = parse_line(line)
        if item is not None:
            items.append(item)
    return items


def fold(items: Iterable[AnnotationItem]) -> List[AnnotationItem]:
    """Merge plain lines into the preceding item.

    A :class:`Plain` item is appended, separated by a newline, to the
    previous item of the result.  When there is no previous item it
    becomes a :class:`Summary`.  The input items are not modified.
    """
    result: List[AnnotationItem] = []
    for item in items:
        if isinstance(item, Plain):
            if result:
                result[-1].append("\n" + item.text)
            else:
                result.append(Summary(item.text))
        else:
            result.append(dataclasses.replace(item))
    return result


def parse_annotation(body: str) -> List[AnnotationItem]:
    """Parse and fold a comment body whose delimiters were removed."""
    return fold(parse_lines(body))


def comment_body(text: str) -> str:
    """Return the annotation body of a ``//*`` or ``/** */`` comment.

    Raises:
        UnparsableComment: If ``text`` is not an annotation comment.
    """
    if text.startswith(LINE_COMMENT_START):
        lines = text[len(LINE_COMMENT_START):].splitlines()
        return lines[0] if lines else ""
    if text.startswith(BLOCK_COMMENT_START):
        end = text.find(BLOCK_COMMENT_END, len(BLOCK_COMMENT_START))
        if end == -1:
            raise UnparsableComment(text, "missing closing '*/'")
        return text[len(BLOCK_COMMENT_START):end]
    raise UnparsableComment(text, "not an annotation comment")


def parse_comment(text: str) -> List[AnnotationItem]:
    """Parse a complete comment into folded annotation items.

    Comments that are not annotation comments (plain ``//`` or ``/* */``
    comments, or a block comment without its closing delimiter) yield an
    empty list.
    """
    try:
        body = comment_body(text)
    except UnparsableComment as exc:
        logger.debug("skipping comment: %s", exc)
        return []
    return parse_annotation(body)
