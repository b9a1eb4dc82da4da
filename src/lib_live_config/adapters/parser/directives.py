"""Parser for the native directive file format.

Purpose
-------
Implement the :class:`lib_live_config.application.ports.DirectiveParser`
protocol for ``.cfg``-style sources.

Format
------
::

    # comments run to the end of the line
    my_string = "hi mom! \\u2603"
    your-int-33 = 33
    his_bool = on
    HerList = [1, "foo", off]

    my-group
    {
      a = 1
      nested { b = "yay!" }
      import "$(HOME)/etc/extra.cfg"
    }

* One directive per line: ``name = value``, ``name { ... }`` or
  ``import "path"``.
* Names start with a letter followed by letters, digits, ``-`` or ``_``;
  ``import`` is reserved.
* Booleans are ``on``/``true`` and ``off``/``false`` (case sensitive),
  integers are signed base 10, strings are double quoted with ``\\n \\r \\t
  \\\\ \\"`` and ``\\uXXXX`` escapes, lists are bracketed and comma separated.
"""

from __future__ import annotations

from ...domain.errors import ParseError
from ...domain.values import Bind, Directive, Group, Import, Value, is_name_char, is_name_start

_BOOLEANS = {"on": True, "true": True, "off": False, "false": False}
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}
_HORIZONTAL = " \t"
_LINE_BREAKS = "\r\n"


class DirectiveFileParser:
    """Parse directive text into a tuple of :class:`Directive` objects.

    Examples
    --------
    >>> DirectiveFileParser().parse('a = 1\\ng { b = "x" }')
    (Bind(name='a', value=1), Group(name='g', body=(Bind(name='b', value='x'),)))
    """

    def parse(self, text: str, *, path: str = "") -> tuple[Directive, ...]:
        return _Scanner(text, path).document()


class _Scanner:
    def __init__(self, text: str, path: str) -> None:
        self.text = text
        self.path = path
        self.pos = 0

    def document(self) -> tuple[Directive, ...]:
        if self.text.startswith("\ufeff"):
            self.pos = 1
        return self.directives(closing=False)

    # -- character helpers -------------------------------------------------

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def expect(self, char: str) -> None:
        if self.peek() != char:
            found = repr(self.peek()) if self.peek() else "end of input"
            raise self.error(f"expected {char!r}, found {found}")
        self.pos += 1

    def error(self, message: str, at: int | None = None) -> ParseError:
        offset = self.pos if at is None else at
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return ParseError(self.path, message, line=line, column=column)

    def skip_comment(self) -> None:
        while not self.at_end() and self.peek() not in _LINE_BREAKS:
            self.pos += 1

    def skip_lws(self) -> None:
        """Skip whitespace, line breaks, and comments."""

        while not self.at_end():
            char = self.peek()
            if char == "#":
                self.skip_comment()
            elif char.isspace():
                self.pos += 1
            else:
                return

    def skip_hws(self) -> None:
        """Skip spaces, tabs, and a trailing comment, stopping at a line break."""

        while not self.at_end():
            char = self.peek()
            if char == "#":
                self.skip_comment()
            elif char in _HORIZONTAL:
                self.pos += 1
            else:
                return

    # -- grammar -------------------------------------------------------------

    def directives(self, *, closing: bool) -> tuple[Directive, ...]:
        items: list[Directive] = []
        while True:
            self.skip_lws()
            if self.at_end():
                if closing:
                    raise self.error("expected '}' to close group")
                break
            if closing and self.peek() == "}":
                break
            items.append(self.directive())
            self.skip_hws()
            char = self.peek()
            if not char or char in _LINE_BREAKS or (closing and char == "}"):
                continue
            raise self.error(f"unexpected {char!r} after directive; expected end of line")
        return tuple(items)

    def directive(self) -> Directive:
        start = self.pos
        name = self.name()
        if name == "import":
            self.skip_lws()
            if self.peek() == '"':
                return Import(self.string())
            raise self.error("'import' is a reserved word and must be followed by a quoted path", at=start)
        self.skip_lws()
        char = self.peek()
        if char == "=":
            self.pos += 1
            self.skip_lws()
            return Bind(name, self.value())
        if char == "{":
            self.pos += 1
            body = self.directives(closing=True)
            self.expect("}")
            return Group(name, body)
        raise self.error(f"expected '=' or '{{' after name {name!r}")

    def name(self) -> str:
        if not is_name_start(self.peek()):
            found = repr(self.peek()) if self.peek() else "end of input"
            raise self.error(f"expected a name, found {found}")
        start = self.pos
        self.pos += 1
        while not self.at_end() and is_name_char(self.peek()):
            self.pos += 1
        return self.text[start : self.pos]

    def value(self) -> Value:
        char = self.peek()
        if char == '"':
            return self.string()
        if char == "[":
            return self.list_value()
        if char and (char in "+-" or char.isdigit()):
            return self.integer()
        if is_name_start(char):
            start = self.pos
            word = self.name()
            if word in _BOOLEANS:
                return _BOOLEANS[word]
            raise self.error(f"unknown value {word!r}; booleans are on/off/true/false", at=start)
        found = repr(char) if char else "end of input"
        raise self.error(f"expected a value, found {found}")

    def integer(self) -> int:
        start = self.pos
        if self.peek() in "+-":
            self.pos += 1
        digits_start = self.pos
        while self.peek().isdigit() and self.peek().isascii():
            self.pos += 1
        if self.pos == digits_start:
            raise self.error("expected digits", at=start)
        if self.peek() == "." or is_name_char(self.peek()):
            raise self.error("only base 10 integers are supported", at=start)
        return int(self.text[start : self.pos])

    def list_value(self) -> tuple[Value, ...]:
        self.expect("[")
        self.skip_lws()
        items: list[Value] = []
        if self.peek() == "]":
            self.pos += 1
            return ()
        while True:
            items.append(self.value())
            self.skip_lws()
            if self.peek() == ",":
                self.pos += 1
                self.skip_lws()
                continue
            self.expect("]")
            return tuple(items)

    def string(self) -> str:
        start = self.pos
        self.expect('"')
        parts: list[str] = []
        while True:
            char = self.peek()
            if not char:
                raise self.error("unterminated string", at=start)
            self.pos += 1
            if char == '"':
                return "".join(parts)
            if char != "\\":
                parts.append(char)
                continue
            escape = self.peek()
            self.pos += 1
            if escape in _ESCAPES:
                parts.append(_ESCAPES[escape])
            elif escape == "u":
                parts.append(self.unicode_escape())
            else:
                raise self.error(f"invalid escape sequence \\{escape}", at=self.pos - 2)

    def unicode_escape(self) -> str:
        code = self.hex4()
        if 0xD800 <= code <= 0xDBFF:
            if self.peek() != "\\" or self.peek(1) != "u":
                raise self.error("high surrogate must be followed by a low surrogate")
            self.pos += 2
            low = self.hex4()
            if not 0xDC00 <= low <= 0xDFFF:
                raise self.error("invalid low surrogate")
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
        elif 0xDC00 <= code <= 0xDFFF:
            raise self.error("unexpected low surrogate")
        return chr(code)

    def hex4(self) -> int:
        digits = self.text[self.pos : self.pos + 4]
        if len(digits) != 4 or any(char not in "0123456789abcdefABCDEF" for char in digits):
            raise self.error("expected four hexadecimal digits after \\u")
        self.pos += 4
        return int(digits, 16)
