"""
Flat JSON tokenizer

Turns a reply body into a flat tuple of tokens instead of a tree of Python
objects. Each token records its type, its byte span in the reply buffer,
the index of its enclosing container and its number of direct children.

Object members are laid out as a key token (size 1, parent = the object)
immediately followed by its value token (parent = the object as well).

Only the reply shapes the window manager emits need to be supported;
anything malformed raises ParseError instead of being recovered from.
"""

from __future__ import annotations
import json
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import List, NamedTuple, Optional, Tuple

from .errors import ParseError


class TokenType(IntEnum):
    """JSON token type."""

    OBJECT = 1
    ARRAY = 2
    STRING = 3
    PRIMITIVE = 4


@dataclass(frozen=True)
class Token:
    """A single JSON token.

    Containers span from the opening bracket to one past the closing one,
    strings span the characters between the quotes and primitives span
    their literal text.
    """

    type: TokenType
    start: int
    end: int
    parent: Optional[int]
    size: int = 0


class StringSpan(NamedTuple):
    """A view of a string token inside the reply buffer."""

    offset: int
    length: int

    @classmethod
    def of(cls, token: Token) -> "StringSpan":
        return cls(token.start, token.end - token.start)

    @property
    def end(self) -> int:
        return self.offset + self.length

    def view(self, buffer: bytes) -> memoryview:
        return memoryview(buffer)[self.offset : self.end]

    def matches(self, buffer: bytes, value: bytes) -> bool:
        """Compare the raw span bytes with value without copying."""
        return self.length == len(value) and self.view(buffer) == value

    def is_escaped(self, buffer: bytes) -> bool:
        return 0x5C in self.view(buffer)

    def equals(self, buffer: bytes, value: bytes) -> bool:
        """Compare the string's JSON value with the UTF-8 encoded value.

        Spans without escapes are compared raw; escaped ones are decoded.
        """
        if not self.is_escaped(buffer):
            return self.matches(buffer, value)
        return self.decode(buffer).encode("utf-8", "surrogatepass") == value

    def text(self, buffer: bytes) -> str:
        """Return the raw span as text, escapes left in place."""
        try:
            return str(self.view(buffer), "utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"invalid UTF-8 in string at offset {self.offset}") from e

    def decode(self, buffer: bytes) -> str:
        """Return the string's value with JSON escapes resolved."""
        raw = self.text(buffer)
        if "\\" not in raw:
            return raw
        try:
            return json.loads(f'"{raw}"')
        except ValueError as e:
            raise ParseError(f"invalid string at offset {self.offset}: {e}") from e


class _Expect(Enum):
    """What the scanner accepts next."""

    VALUE = auto()
    VALUE_OR_CLOSE = auto()
    KEY = auto()
    KEY_OR_CLOSE = auto()
    COLON = auto()
    COMMA_OR_CLOSE = auto()
    END = auto()


WHITESPACE = b" \t\r\n"
PRIMITIVE_START = b"-0123456789tfn"
NUMBER_CHARS = b"0123456789+-.eE"
PRIMITIVE_DELIMITERS = b" \t\r\n,]}:"
ESCAPES = b'"/\\bfnrt'
HEX_DIGITS = b"0123456789abcdefABCDEF"
LITERALS = (b"true", b"false", b"null")

_VALUE_STATES = (_Expect.VALUE, _Expect.VALUE_OR_CLOSE)
_KEY_STATES = (_Expect.KEY, _Expect.KEY_OR_CLOSE)


class Tokenizer:
    """Single pass tokenizer over one reply buffer.

    Tokens are kept in parallel lists while scanning (the end and size of a
    container are only known once it closes) and frozen into Token objects
    when the scan completes. The table never holds more than `capacity`
    tokens.
    """

    def __init__(self, data: bytes, capacity: Optional[int] = None):
        self.data = data
        self.capacity = len(data) if capacity is None else capacity

        self._types: List[TokenType] = []
        self._starts: List[int] = []
        self._ends: List[int] = []
        self._parents: List[Optional[int]] = []
        self._sizes: List[int] = []

        # Indices of the containers that are currently open
        self._stack: List[int] = []
        # Key waiting for its value in the innermost object
        self._key: Optional[int] = None
        self._expect = _Expect.VALUE

    def parse(self) -> Tuple[Token, ...]:
        data = self.data
        length = len(data)
        pos = 0

        while pos < length:
            c = data[pos]
            if c in WHITESPACE:
                pos += 1
            elif c == 0x7B or c == 0x5B:  # { [
                self._open(pos)
                pos += 1
            elif c == 0x7D or c == 0x5D:  # } ]
                self._close(pos)
                pos += 1
            elif c == 0x22:  # "
                pos = self._string(pos)
            elif c == 0x3A:  # :
                if self._expect is not _Expect.COLON:
                    raise ParseError(f"unexpected ':' at offset {pos}")
                self._expect = _Expect.VALUE
                pos += 1
            elif c == 0x2C:  # ,
                if self._expect is not _Expect.COMMA_OR_CLOSE:
                    raise ParseError(f"unexpected ',' at offset {pos}")
                inner = self._types[self._stack[-1]]
                self._expect = _Expect.KEY if inner is TokenType.OBJECT else _Expect.VALUE
                pos += 1
            else:
                pos = self._primitive(pos)

        if not self._types:
            raise ParseError("empty reply")
        if self._stack or self._expect is not _Expect.END:
            raise ParseError("unexpected end of reply")
        return self._freeze()

    def _allocate(self, token_type: TokenType, start: int, end: int, parent) -> int:
        index = len(self._types)
        if index >= self.capacity:
            raise ParseError(f"reply needs more than {self.capacity} tokens")
        self._types.append(token_type)
        self._starts.append(start)
        self._ends.append(end)
        self._parents.append(parent)
        self._sizes.append(0)
        return index

    def _begin_value(self, pos: int) -> Optional[int]:
        """Account for a new value and return its parent index."""
        if self._expect not in _VALUE_STATES:
            raise ParseError(f"unexpected value at offset {pos}")
        if not self._stack:
            return None
        parent = self._stack[-1]
        if self._key is not None:
            self._sizes[self._key] = 1
            self._key = None
        else:
            self._sizes[parent] += 1
        return parent

    def _end_value(self):
        self._expect = _Expect.COMMA_OR_CLOSE if self._stack else _Expect.END

    def _open(self, pos: int):
        parent = self._begin_value(pos)
        token_type = TokenType.OBJECT if self.data[pos] == 0x7B else TokenType.ARRAY
        index = self._allocate(token_type, pos, -1, parent)
        self._stack.append(index)
        self._expect = (
            _Expect.KEY_OR_CLOSE if token_type is TokenType.OBJECT else _Expect.VALUE_OR_CLOSE
        )

    def _close(self, pos: int):
        if not self._stack:
            raise ParseError(f"unmatched bracket at offset {pos}")
        index = self._stack[-1]
        token_type = TokenType.OBJECT if self.data[pos] == 0x7D else TokenType.ARRAY
        if self._types[index] is not token_type:
            raise ParseError(f"mismatched bracket at offset {pos}")
        if self._expect not in (_Expect.COMMA_OR_CLOSE, _Expect.KEY_OR_CLOSE, _Expect.VALUE_OR_CLOSE):
            raise ParseError(f"unexpected closing bracket at offset {pos}")
        self._ends[index] = pos + 1
        self._stack.pop()
        self._end_value()

    def _string(self, pos: int) -> int:
        data = self.data
        length = len(data)
        start = pos + 1
        i = start

        while i < length:
            c = data[i]
            if c == 0x22:
                break
            if c == 0x5C:  # backslash
                i += 1
                if i >= length:
                    break
                if data[i] == 0x75:  # \uXXXX
                    digits = data[i + 1 : i + 5]
                    if len(digits) != 4 or any(d not in HEX_DIGITS for d in digits):
                        raise ParseError(f"invalid unicode escape at offset {i - 1}")
                    i += 4
                elif data[i] not in ESCAPES:
                    raise ParseError(f"invalid escape at offset {i - 1}")
            i += 1
        else:
            raise ParseError(f"unterminated string at offset {pos}")
        if i >= length:
            raise ParseError(f"unterminated string at offset {pos}")

        if self._expect in _KEY_STATES:
            self._sizes[self._stack[-1]] += 1
            self._key = self._allocate(TokenType.STRING, start, i, self._stack[-1])
            self._expect = _Expect.COLON
        else:
            parent = self._begin_value(pos)
            self._allocate(TokenType.STRING, start, i, parent)
            self._end_value()
        return i + 1

    def _primitive(self, pos: int) -> int:
        data = self.data
        if data[pos] not in PRIMITIVE_START:
            raise ParseError(f"unexpected character {chr(data[pos])!r} at offset {pos}")

        end = pos
        while end < len(data) and data[end] not in PRIMITIVE_DELIMITERS:
            end += 1
        literal = data[pos:end]
        if data[pos] in b"tfn":
            if literal not in LITERALS:
                raise ParseError(f"invalid literal {literal!r} at offset {pos}")
        elif any(c not in NUMBER_CHARS for c in literal):
            raise ParseError(f"invalid number {literal!r} at offset {pos}")

        parent = self._begin_value(pos)
        self._allocate(TokenType.PRIMITIVE, pos, end, parent)
        self._end_value()
        return end

    def _freeze(self) -> Tuple[Token, ...]:
        return tuple(
            Token(token_type, start, end, parent, size)
            for token_type, start, end, parent, size in zip(
                self._types, self._starts, self._ends, self._parents, self._sizes
            )
        )


def parse(data: bytes, capacity: Optional[int] = None) -> Tuple[Token, ...]:
    """Tokenize a reply body.

    Args:
        data: Raw reply payload
        capacity: Maximum number of tokens, defaults to len(data)

    Returns:
        Tokens in document order; index 0 is the root value.

    Raises:
        ParseError: if the data is malformed or needs too many tokens
    """
    return Tokenizer(data, capacity).parse()
