"""JSON value model.

A :class:`Value` is a closed tagged variant over the six JSON kinds.
Numbers keep their source lexeme and objects keep their key order, so a
value decoded from text renders back the way it was written.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, auto


class ValueKind(Enum):
    NULL = auto()
    BOOL = auto()
    NUMBER = auto()
    STRING = auto()
    ARRAY = auto()
    OBJECT = auto()


_CONTAINERS = frozenset({ValueKind.ARRAY, ValueKind.OBJECT})


@dataclass(frozen=True)
class Value:
    """One JSON value.

    ``data`` by kind:
      NULL   -> None
      BOOL   -> bool
      NUMBER -> str (the number lexeme, e.g. ``"1.50"``)
      STRING -> str
      ARRAY  -> tuple[Value, ...]
      OBJECT -> tuple[tuple[str, Value], ...] (unique keys, source order)
    """

    kind: ValueKind
    data: object = None

    # -- Constructors ------------------------------------------------------

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def boolean(cls, flag: bool) -> Value:
        return cls(ValueKind.BOOL, bool(flag))

    @classmethod
    def number(cls, lexeme: str | int | float) -> Value:
        return cls(ValueKind.NUMBER, lexeme if isinstance(lexeme, str) else repr(lexeme))

    @classmethod
    def string(cls, text: str) -> Value:
        return cls(ValueKind.STRING, text)

    @classmethod
    def array(cls, items) -> Value:
        return cls(ValueKind.ARRAY, tuple(items))

    @classmethod
    def object(cls, pairs) -> Value:
        """Build an object; a repeated key keeps its first position, last value."""
        merged: dict[str, Value] = {}
        for key, value in pairs:
            merged[key] = value
        return cls(ValueKind.OBJECT, tuple(merged.items()))

    @classmethod
    def from_python(cls, obj: object) -> Value:
        """Convert plain Python data (as produced by ``json.loads``)."""
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, (int, float)):
            return cls.number(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, (list, tuple)):
            return cls.array(cls.from_python(v) for v in obj)
        if isinstance(obj, dict):
            return cls.object((str(k), cls.from_python(v)) for k, v in obj.items())
        raise TypeError(f"not a JSON value: {type(obj).__name__}")

    # -- Queries -----------------------------------------------------------

    @property
    def is_container(self) -> bool:
        return self.kind in _CONTAINERS

    def children(self) -> list[tuple[str | int, Value]]:
        """Child ``(step, value)`` pairs; empty for scalars."""
        kind = self.kind
        if kind == ValueKind.ARRAY:
            return list(enumerate(self.data))
        if kind == ValueKind.OBJECT:
            return list(self.data)
        if kind in (ValueKind.NULL, ValueKind.BOOL, ValueKind.NUMBER, ValueKind.STRING):
            return []
        raise TypeError(f"unknown value kind: {kind!r}")

    def __len__(self) -> int:
        return len(self.data) if self.is_container else 0

    def to_text(self) -> str:
        """Textual rendering of a scalar, as it would appear in JSON."""
        kind = self.kind
        if kind == ValueKind.NULL:
            return "null"
        if kind == ValueKind.BOOL:
            return "true" if self.data else "false"
        if kind == ValueKind.NUMBER:
            return self.data
        if kind == ValueKind.STRING:
            return json.dumps(self.data, ensure_ascii=False)
        if kind == ValueKind.ARRAY:
            return "[" + ", ".join(v.to_text() for v in self.data) + "]"
        if kind == ValueKind.OBJECT:
            inner = ", ".join(
                f"{json.dumps(k, ensure_ascii=False)}: {v.to_text()}" for k, v in self.data
            )
            return "{" + inner + "}"
        raise TypeError(f"unknown value kind: {kind!r}")

    def search_text(self) -> str:
        """Text a search term is matched against (raw content for strings)."""
        if self.kind == ValueKind.STRING:
            return self.data
        return self.to_text()

    def to_python(self) -> object:
        kind = self.kind
        if kind in (ValueKind.NULL, ValueKind.BOOL, ValueKind.STRING):
            return self.data
        if kind == ValueKind.NUMBER:
            lexeme = self.data
            if any(c in lexeme for c in ".eE"):
                return float(lexeme)
            return int(lexeme)
        if kind == ValueKind.ARRAY:
            return [v.to_python() for v in self.data]
        if kind == ValueKind.OBJECT:
            return {k: v.to_python() for k, v in self.data}
        raise TypeError(f"unknown value kind: {kind!r}")


# -- Decoding ----------------------------------------------------------------


class _Number(str):
    """Marks a number lexeme coming out of the decoder."""


class _Pairs(list):
    """Marks an object's key/value pairs coming out of the decoder."""


def _reject_constant(name: str) -> None:
    raise ValueError(f"invalid constant {name}")


_DECODER = json.JSONDecoder(
    object_pairs_hook=_Pairs,
    parse_float=_Number,
    parse_int=_Number,
    parse_constant=_reject_constant,
)


def _scalar(obj: object) -> Value:
    if isinstance(obj, _Number):
        return Value.number(str(obj))
    return Value.from_python(obj)


def _convert(obj: object) -> Value:
    """Turn decoder output into a :class:`Value`.

    Works bottom-up with an explicit stack: the decoder accepts nesting
    deeper than the interpreter's recursion limit allows a recursive walk.
    """
    if not isinstance(obj, list):
        return _scalar(obj)
    # Frames are [container, converted children, next position].
    stack = [[obj, [], 0]]
    while True:
        frame = stack[-1]
        container, done, pos = frame
        if pos < len(container):
            frame[2] = pos + 1
            item = container[pos]
            child = item[1] if isinstance(container, _Pairs) else item
            if isinstance(child, list):
                stack.append([child, [], 0])
            else:
                done.append(_scalar(child))
            continue
        if isinstance(container, _Pairs):
            value = Value.object(zip((k for k, _ in container), done))
        else:
            value = Value.array(done)
        stack.pop()
        if not stack:
            return value
        stack[-1][1].append(value)


def decode(text: str) -> Value:
    """Decode exactly one JSON value.

    Raises ``json.JSONDecodeError`` (or ``ValueError`` for NaN/Infinity).
    """
    return _convert(_DECODER.decode(text))
