"""Reader for PowerShell ``param(...)`` blocks.

This is a small scanner, not a PowerShell parser. It locates the
first parameter block of a script, then reads each declaration into the AST
nodes of ``dynparam.syntax.model``. Expressions (attribute arguments, default
values) are never interpreted: the scanner only tracks brackets, strings and
comments well enough to find where each expression ends, and hands back the
original source text.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from dynparam.exceptions import ParseError
from dynparam.syntax.model import (
    AnnotationKind,
    AnnotationNode,
    NamedArgument,
    ParamBlockNode,
    ParameterNode,
    ScriptNode,
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_QUOTES = ("'", '"')

_PARAM_KEYWORD_RE = re.compile(r"param\s*\(", re.IGNORECASE)
_WORD_RE = re.compile(r"[\w$-]+")
_TYPE_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.`]*")
_VARIABLE_RE = re.compile(
    r"\$(?:(?P<scope>[A-Za-z]+):)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
)
_BARE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NAMED_ARG_RE = re.compile(
    r"^(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*=(?!=)\s*(?P<value>.*)$", re.DOTALL
)


def parse_script(text: str) -> ScriptNode:
    """Read the first ``param(...)`` block of ``text``.

    A script with no parameter block gives ``ScriptNode(param_block=None)``;
    deciding whether that is an error is left to the caller.
    """
    reader = _Reader(text)
    located = reader.locate_param_block()
    if located is None:
        return ScriptNode(param_block=None)
    open_index, attributes = located
    parameters = reader.read_parameters(open_index)
    return ScriptNode(
        param_block=ParamBlockNode(
            parameters=tuple(parameters),
            attributes=tuple(attributes),
        )
    )


class _Reader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str, offset: int | None = None) -> ParseError:
        index = self.pos if offset is None else offset
        line = self.text.count("\n", 0, index) + 1
        column = index - (self.text.rfind("\n", 0, index) + 1) + 1
        return ParseError(message, line=line, column=column)

    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    # --- low-level scanning -------------------------------------------------

    def _starts_here_string(self, index: int) -> bool:
        text = self.text
        if text[index] != "@" or index + 1 >= len(text):
            return False
        if text[index + 1] not in _QUOTES:
            return False
        line_end = text.find("\n", index + 2)
        rest = text[index + 2 :] if line_end == -1 else text[index + 2 : line_end]
        return not rest.strip()

    def _string_end(self, start: int) -> int:
        text = self.text
        if text[start] == "@":
            terminator = "\n" + text[start + 1] + "@"
            end = text.find(terminator, start + 2)
            if end == -1:
                raise self.error("unterminated here-string", start)
            return end + len(terminator)
        quote = text[start]
        index = start + 1
        while index < len(text):
            ch = text[index]
            if quote == '"' and ch == "`":
                index += 2
                continue
            if ch == quote:
                if index + 1 < len(text) and text[index + 1] == quote:
                    index += 2
                    continue
                return index + 1
            index += 1
        raise self.error("unterminated string", start)

    def _comment_end(self, start: int) -> int:
        end = self.text.find("#>", start + 2)
        if end == -1:
            raise self.error("unterminated block comment", start)
        return end + 2

    def _line_end(self, start: int) -> int:
        end = self.text.find("\n", start)
        return len(self.text) if end == -1 else end

    def _comment_allowed(self, index: int) -> bool:
        # '#' only opens a comment at the start of a token.
        if index == 0:
            return True
        previous = self.text[index - 1]
        return previous.isspace() or previous in "([{;,"

    def _skip_spaces(self, index: int, limit: int) -> int:
        while index < limit and self.text[index].isspace():
            index += 1
        return index

    def _group_end(self, start: int) -> int:
        """Return the index just past the bracket matching ``text[start]``."""
        text = self.text
        stack = [_OPENERS[text[start]]]
        index = start + 1
        while index < len(text):
            ch = text[index]
            if ch in _QUOTES or self._starts_here_string(index):
                index = self._string_end(index)
                continue
            if text.startswith("<#", index):
                index = self._comment_end(index)
                continue
            if ch == "#" and self._comment_allowed(index):
                index = self._line_end(index)
                continue
            if ch == "`":
                index += 2
                continue
            if ch in _OPENERS:
                stack.append(_OPENERS[ch])
            elif ch in _CLOSERS:
                if ch != stack[-1]:
                    raise self.error(f"mismatched {ch!r}", index)
                stack.pop()
                if not stack:
                    return index + 1
            index += 1
        raise self.error(f"unclosed {text[start]!r}", start)

    def skip_trivia(self) -> None:
        text = self.text
        while not self.at_end():
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
                continue
            if text.startswith("<#", self.pos):
                self.pos = self._comment_end(self.pos)
                continue
            if ch == "#":
                self.pos = self._line_end(self.pos)
                continue
            if ch == "`" and text[self.pos + 1 : self.pos + 2] in ("\n", "\r"):
                self.pos += 2
                continue
            break

    # --- block discovery ----------------------------------------------------

    def locate_param_block(self) -> Tuple[int, List[str]] | None:
        """Find the opening parenthesis of the first ``param`` keyword.

        Bracketed groups seen directly before the keyword (``[CmdletBinding()]``
        and friends) are returned verbatim as the block's attributes.
        """
        text = self.text
        pending: List[str] = []
        index = 0
        while index < len(text):
            ch = text[index]
            if ch.isspace():
                index += 1
                continue
            if text.startswith("<#", index):
                index = self._comment_end(index)
                continue
            if ch == "#":
                index = self._line_end(index)
                continue
            if ch in _QUOTES or self._starts_here_string(index):
                pending = []
                index = self._string_end(index)
                continue
            if ch == "[":
                end = self._group_end(index)
                pending.append(text[index:end])
                index = end
                continue
            match = _PARAM_KEYWORD_RE.match(text, index)
            if match is not None and (index == 0 or text[index - 1] != "."):
                return match.end() - 1, pending
            pending = []
            if ch == "`":
                index += 2
                continue
            word = _WORD_RE.match(text, index)
            index = word.end() if word is not None else index + 1
        return None

    # --- declarations -------------------------------------------------------

    def read_parameters(self, open_index: int) -> List[ParameterNode]:
        self.pos = open_index + 1
        parameters: List[ParameterNode] = []
        while True:
            self.skip_trivia()
            if self.at_end():
                raise self.error("unterminated param() block", open_index)
            if self.peek() == ")":
                self.pos += 1
                return parameters
            parameters.append(self.read_parameter())
            self.skip_trivia()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
                continue
            if ch == ")" or not ch:
                continue
            raise self.error(f"expected ',' or ')' after parameter, found {ch!r}")

    def read_parameter(self) -> ParameterNode:
        start = self.pos
        annotations: List[AnnotationNode] = []
        while self.peek() == "[":
            annotations.append(self.read_annotation())
            self.skip_trivia()
        name = self.read_variable()
        end = self.pos
        default: str | None = None
        self.skip_trivia()
        if self.peek() == "=":
            self.pos += 1
            self.skip_trivia()
            expression_start = self.pos
            default, end = self.read_expression()
            if not default:
                raise self.error("missing default value", expression_start)
        return ParameterNode(
            name=name,
            annotations=tuple(annotations),
            default=default,
            extent=self.text[start:end],
        )

    def read_variable(self) -> str:
        text = self.text
        if text.startswith("${", self.pos):
            close = text.find("}", self.pos + 2)
            if close == -1:
                raise self.error("unterminated ${...} variable")
            name = text[self.pos + 2 : close]
            self.pos = close + 1
            return name
        match = _VARIABLE_RE.match(text, self.pos)
        if match is None:
            raise self.error("expected a parameter variable such as $Name")
        self.pos = match.end()
        return match.group("name")

    def read_expression(self) -> Tuple[str, int]:
        """Consume an expression up to a top-level ',' or ')'.

        Returns the expression text without trailing trivia, and the index where
        that text ends.
        """
        text = self.text
        start = self.pos
        index = start
        end = start
        while index < len(text):
            ch = text[index]
            if ch in ",)":
                break
            if ch.isspace():
                index += 1
                continue
            if text.startswith("<#", index):
                index = self._comment_end(index)
                continue
            if ch == "#" and self._comment_allowed(index):
                index = self._line_end(index)
                continue
            if ch in _QUOTES or self._starts_here_string(index):
                index = self._string_end(index)
            elif ch in _OPENERS:
                index = self._group_end(index)
            elif ch in _CLOSERS:
                raise self.error(f"unexpected {ch!r}", index)
            elif ch == "`":
                index += 2
            else:
                index += 1
            end = index
        self.pos = index
        return text[start:end], end

    def read_annotation(self) -> AnnotationNode:
        text = self.text
        start = self.pos
        end = self._group_end(start)
        close = end - 1
        self.pos = end
        extent = text[start:end]
        index = self._skip_spaces(start + 1, close)
        match = _TYPE_NAME_RE.match(text, index, close)
        if match is None:
            raise self.error("expected an attribute or type name", index)
        index = match.end()
        while index < close and text[index] == "[":
            index = self._group_end(index)
        tag = text[match.start() : index]
        after = self._skip_spaces(index, close)
        if after == close:
            return AnnotationNode(
                tag=tag, kind=AnnotationKind.TYPE_CONSTRAINT, extent=extent
            )
        if text[after] != "(":
            raise self.error("unexpected text in attribute", after)
        arguments_end = self._group_end(after)
        if self._skip_spaces(arguments_end, close) != close:
            raise self.error("unexpected text after attribute arguments", arguments_end)
        positional, named = self._split_arguments(after + 1, arguments_end - 1)
        return AnnotationNode(
            tag=tag,
            kind=AnnotationKind.ATTRIBUTE,
            positional=tuple(positional),
            named=tuple(named),
            extent=extent,
        )

    def _split_arguments(
        self, start: int, stop: int
    ) -> Tuple[List[str], List[NamedArgument]]:
        text = self.text
        pieces: List[Tuple[int, str]] = []
        # Comment spans are cut out of a piece; the rest is kept verbatim.
        kept: List[str] = []
        piece_start = start
        segment_start = start
        index = start
        while index < stop:
            ch = text[index]
            if ch in _QUOTES or self._starts_here_string(index):
                index = self._string_end(index)
            elif ch in _OPENERS:
                index = self._group_end(index)
            elif text.startswith("<#", index) or (
                ch == "#" and self._comment_allowed(index)
            ):
                kept.append(text[segment_start:index])
                if ch == "<":
                    index = self._comment_end(index)
                else:
                    index = min(self._line_end(index), stop)
                segment_start = index
            elif ch == "`":
                index += 2
            elif ch == ",":
                kept.append(text[segment_start:index])
                pieces.append((piece_start, "".join(kept)))
                kept = []
                piece_start = segment_start = index + 1
                index += 1
            else:
                index += 1
        kept.append(text[segment_start:stop])
        tail = "".join(kept)
        if tail.strip() or pieces:
            pieces.append((piece_start, tail))

        positional: List[str] = []
        named: List[NamedArgument] = []
        for offset, piece in pieces:
            argument = piece.strip()
            if not argument:
                raise self.error("empty attribute argument", offset)
            named_match = _NAMED_ARG_RE.match(argument)
            if named_match is not None:
                value = named_match.group("value").strip()
                if not value:
                    raise self.error(
                        f"missing value for attribute argument {named_match.group('name')!r}",
                        offset,
                    )
                named.append(NamedArgument(named_match.group("name"), value))
            elif _BARE_NAME_RE.match(argument):
                named.append(NamedArgument(argument))
            else:
                positional.append(argument)
        return positional, named
