"""Split a text stream into concatenated top-level JSON values."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterator

from jvt.values import Value, decode

_WHITESPACE = frozenset(" \t\r\n")
_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = frozenset("}]")
# Characters that end a bare scalar token.
_DELIMITERS = frozenset(' \t\r\n{}[]",')
_SCALAR_START = frozenset("-0123456789tfn")


class ParseError(ValueError):
    """Malformed JSON in the input stream."""

    def __init__(self, offset: int, reason: str) -> None:
        super().__init__(f"byte {offset}: {reason}")
        self.offset = offset
        self.reason = reason


@dataclass(frozen=True)
class Record:
    """One top-level value from the input.

    ``index`` is 1-based; ``span`` is the ``(start, end)`` byte range.
    """

    index: int
    value: Value
    span: tuple[int, int]


class _ByteOffsets:
    """Translate character offsets into UTF-8 byte offsets, left to right."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._ascii = text.isascii()
        self._char = 0
        self._byte = 0

    def __call__(self, pos: int) -> int:
        if self._ascii:
            return pos
        if pos < self._char:
            self._char = 0
            self._byte = 0
        self._byte += len(self.text[self._char : pos].encode("utf-8"))
        self._char = pos
        return self._byte


def _scan_container(text: str, start: int, to_bytes: _ByteOffsets) -> int:
    """Return the index just past the container opening at *start*."""
    stack = [_OPENERS[text[start]]]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            i = _scan_string(text, i, to_bytes)
            continue
        if ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            expected = stack.pop()
            if ch != expected:
                raise ParseError(
                    to_bytes(i), f"unbalanced brackets: expected {expected!r}, found {ch!r}"
                )
            if not stack:
                return i + 1
        i += 1
    raise ParseError(to_bytes(start), f"unterminated value: missing {stack[-1]!r}")


def _scan_string(text: str, start: int, to_bytes: _ByteOffsets) -> int:
    """Return the index just past the string opening at *start*."""
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i + 1
        i += 1
    raise ParseError(to_bytes(start), "unterminated string")


def _scan_scalar(text: str, start: int) -> int:
    i = start
    n = len(text)
    while i < n and text[i] not in _DELIMITERS:
        i += 1
    return i


def split_records(text: str) -> Iterator[Record]:
    """Yield each complete top-level value in *text*, in order.

    Values may follow each other directly or with whitespace between them.
    Raises :class:`ParseError` at the first malformed value; nothing is
    yielded for that span.
    """
    to_bytes = _ByteOffsets(text)
    n = len(text)
    i = 1 if text.startswith("\ufeff") else 0
    index = 0
    while True:
        while i < n and text[i] in _WHITESPACE:
            i += 1
        if i >= n:
            return
        ch = text[i]
        if ch in _OPENERS:
            end = _scan_container(text, i, to_bytes)
        elif ch == '"':
            end = _scan_string(text, i, to_bytes)
        elif ch in _SCALAR_START:
            end = _scan_scalar(text, i)
        elif ch in _CLOSERS:
            raise ParseError(to_bytes(i), f"unexpected {ch!r} with no open value")
        else:
            raise ParseError(to_bytes(i), f"unexpected character {ch!r}")

        chunk = text[i:end]
        try:
            value = decode(chunk)
        except json.JSONDecodeError as e:
            raise ParseError(to_bytes(i + e.pos), e.msg) from e
        except ValueError as e:
            raise ParseError(to_bytes(i), str(e)) from e
        except RecursionError as e:
            raise ParseError(to_bytes(i), "value nested too deeply") from e

        index += 1
        yield Record(index=index, value=value, span=(to_bytes(i), to_bytes(end)))
        i = end


def load_records(text: str) -> list[Record]:
    """Split *text* completely, so a malformed value fails before any use."""
    return list(split_records(text))
