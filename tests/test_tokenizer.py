"""
Unit tests for the flat JSON tokenizer.
"""

import pytest
from wsswitch.errors import ParseError
from wsswitch.tokenizer import StringSpan, Token, TokenType, parse

DOCUMENT = b'[{"a": 1, "b": [true, "x"]}, "y"]'


@pytest.mark.unit
class TestTokenizer:
    """Test token layout for well-formed input."""

    def test_document_tokens(self):
        """Tokens come out in document order with spans, parents and sizes."""
        tokens = parse(DOCUMENT)

        assert tokens == (
            Token(TokenType.ARRAY, 0, 33, None, 2),
            Token(TokenType.OBJECT, 1, 27, 0, 2),
            Token(TokenType.STRING, 3, 4, 1, 1),
            Token(TokenType.PRIMITIVE, 7, 8, 1, 0),
            Token(TokenType.STRING, 11, 12, 1, 1),
            Token(TokenType.ARRAY, 15, 26, 1, 2),
            Token(TokenType.PRIMITIVE, 16, 20, 5, 0),
            Token(TokenType.STRING, 23, 24, 5, 0),
            Token(TokenType.STRING, 30, 31, 0, 0),
        )

    def test_value_follows_key(self):
        """An object value sits right after its key and shares its parent."""
        data = b'{"name": "3", "focused": false}'
        tokens = parse(data)

        for key in (1, 3):
            assert tokens[key].type is TokenType.STRING
            assert tokens[key].size == 1
            assert tokens[key + 1].parent == tokens[key].parent == 0
        assert data[tokens[2].start : tokens[2].end] == b"3"
        assert data[tokens[4].start : tokens[4].end] == b"false"

    def test_parents_precede_children(self, three_workspaces):
        tokens = parse(three_workspaces)

        assert tokens[0].parent is None
        for index, token in enumerate(tokens[1:], start=1):
            assert token.parent is not None
            assert token.parent < index
            assert tokens[token.parent].start <= token.start
            assert token.end <= tokens[token.parent].end

    def test_starts_increase(self, three_workspaces):
        tokens = parse(three_workspaces)
        starts = [token.start for token in tokens]

        assert starts == sorted(set(starts))

    def test_container_sizes(self):
        tokens = parse(b'{"a": {}, "b": [], "c": [1, 2, 3]}')

        assert tokens[0].size == 3
        assert tokens[2].type is TokenType.OBJECT and tokens[2].size == 0
        assert tokens[4].type is TokenType.ARRAY and tokens[4].size == 0
        assert tokens[6].size == 3

    def test_primitive_root(self):
        assert parse(b" true ") == (Token(TokenType.PRIMITIVE, 1, 5, None, 0),)

    def test_numbers(self):
        tokens = parse(b"[-1, 2.5e3, 0]")
        assert [t.type for t in tokens[1:]] == [TokenType.PRIMITIVE] * 3

    def test_escaped_quote(self):
        """An escaped quote does not end the string."""
        data = b'["a\\"b"]'
        tokens = parse(data)

        assert len(tokens) == 2
        assert data[tokens[1].start : tokens[1].end] == b'a\\"b'

    def test_unicode_escape(self):
        tokens = parse(b'["\\u00e9"]')
        assert tokens[1].end - tokens[1].start == 6

    def test_utf8_offsets_are_bytes(self):
        data = '["ü", "x"]'.encode("utf-8")
        tokens = parse(data)

        assert StringSpan.of(tokens[1]).text(data) == "ü"
        assert StringSpan.of(tokens[2]).text(data) == "x"

    def test_empty_string(self):
        tokens = parse(b'[""]')
        assert tokens[1].start == tokens[1].end == 2

    def test_tokens_are_immutable(self):
        token = parse(b"[1]")[1]
        with pytest.raises(AttributeError):
            token.start = 5


@pytest.mark.unit
class TestTokenizerErrors:
    """Malformed input fails fast."""

    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"   ",
            b'["abc',
            b'["abc\\',
            b"[1, 2",
            b"[1}",
            b"]",
            b'{"a" 1}',
            b'{"a": }',
            b"{1: 2}",
            b'{"a": 1,}',
            b"[1,]",
            b"[,1]",
            b"[1 2]",
            b"[1] [2]",
            b'"a": 1',
            b"[tru]",
            b"[nulls]",
            b"[1x]",
            b"[@]",
            b'["\\q"]',
            b'["\\u12G4"]',
            b'["\\u12"]',
        ],
    )
    def test_malformed(self, data):
        with pytest.raises(ParseError):
            parse(data)

    def test_capacity_exceeded(self):
        """The token table never grows past its capacity."""
        with pytest.raises(ParseError):
            parse(b"[1,2,3]", capacity=3)

    def test_capacity_exact(self):
        assert len(parse(b"[1,2,3]", capacity=4)) == 4


@pytest.mark.unit
class TestStringSpan:
    """Test spans into the reply buffer."""

    def test_matches(self):
        buffer = b'{"name": "web"}'
        span = StringSpan.of(parse(buffer)[2])

        assert span == StringSpan(10, 3)
        assert span.matches(buffer, b"web")
        assert not span.matches(buffer, b"we")
        assert not span.matches(buffer, b"wex")

    def test_equals_plain(self):
        buffer = b'["web"]'
        assert StringSpan(2, 3).equals(buffer, b"web")
        assert not StringSpan(2, 3).equals(buffer, b"mail")

    def test_equals_resolves_escapes(self):
        buffer = b'["web\\/mail"]'
        span = StringSpan.of(parse(buffer)[1])

        assert span.is_escaped(buffer)
        assert span.equals(buffer, b"web/mail")
        assert not span.matches(buffer, b"web/mail")

    def test_equals_unicode_escape(self):
        buffer = b'["\\u00fc"]'
        assert StringSpan.of(parse(buffer)[1]).equals(buffer, "ü".encode("utf-8"))

    def test_decode(self):
        buffer = b'["a\\"b\\\\c", "plain"]'
        tokens = parse(buffer)

        assert StringSpan.of(tokens[1]).decode(buffer) == 'a"b\\c'
        assert StringSpan.of(tokens[2]).decode(buffer) == "plain"

    def test_text_invalid_utf8(self):
        with pytest.raises(ParseError):
            StringSpan(2, 1).text(b'["\xff"]')

    def test_decode_control_character(self):
        """Raw control characters pass the tokenizer but not decoding."""
        buffer = b'["bad\x01x\\n"]'
        span = StringSpan.of(parse(buffer)[1])

        with pytest.raises(ParseError):
            span.decode(buffer)

    def test_view_does_not_copy(self):
        buffer = bytearray(b'["abc"]')
        view = StringSpan(2, 3).view(buffer)

        buffer[2] = ord("x")
        assert bytes(view) == b"xbc"

    def test_text(self):
        assert StringSpan(1, 2).text(b"xHDMI") == "HD"
        assert StringSpan(1, 2).end == 3
