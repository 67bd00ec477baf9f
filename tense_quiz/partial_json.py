"""Decode a growing prefix of a JSON object into its best-effort value.

Unfinished containers are closed; unfinished scalars are left out together
with their key, so a string, number or literal only appears once its final
character has arrived and never changes afterwards.
"""
from __future__ import annotations

import json

_WHITESPACE = " \t\r\n"
_NUMBER_CHARS = "+-0123456789.eE"
_LITERALS = (("true", True), ("false", False), ("null", None))
_MISSING = object()


class PartialJSONError(ValueError):
    """The text cannot be the beginning of a JSON document."""


class _Truncated(Exception):
    """Input ended inside a value; ``partial`` is what could be recovered."""

    def __init__(self, partial=_MISSING):
        super().__init__()
        self.partial = partial


class _Decoder:
    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def _peek(self) -> str | None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def _error(self, what: str) -> PartialJSONError:
        return PartialJSONError(f"{what} at offset {self.pos}")

    def value(self):
        ch = self._peek()
        if ch is None:
            raise _Truncated()
        if ch == "{":
            return self._object()
        if ch == "[":
            return self._array()
        if ch == '"':
            return self._string()
        if ch == "-" or ch.isdigit():
            return self._number()
        return self._literal()

    def _object(self) -> dict:
        self.pos += 1
        result: dict = {}
        expect_key = True
        while True:
            ch = self._peek()
            if ch is None:
                raise _Truncated(result)
            if ch == "}":
                self.pos += 1
                return result
            if ch == "," and not expect_key:
                self.pos += 1
                expect_key = True
                continue
            if ch != '"' or not expect_key:
                raise self._error("expected object key")
            try:
                key = self._string()
            except _Truncated:
                raise _Truncated(result) from None
            ch = self._peek()
            if ch is None:
                raise _Truncated(result)
            if ch != ":":
                raise self._error("expected ':'")
            self.pos += 1
            try:
                result[key] = self.value()
            except _Truncated as exc:
                if exc.partial is not _MISSING:
                    result[key] = exc.partial
                raise _Truncated(result) from None
            expect_key = False

    def _array(self) -> list:
        self.pos += 1
        result: list = []
        expect_item = True
        while True:
            ch = self._peek()
            if ch is None:
                raise _Truncated(result)
            if ch == "]":
                self.pos += 1
                return result
            if ch == "," and not expect_item:
                self.pos += 1
                expect_item = True
                continue
            if not expect_item:
                raise self._error("expected ',' or ']'")
            try:
                result.append(self.value())
            except _Truncated as exc:
                if exc.partial is not _MISSING:
                    result.append(exc.partial)
                raise _Truncated(result) from None
            expect_item = False

    def _string(self) -> str:
        text = self.text
        start = self.pos
        i = start + 1
        while i < len(text):
            ch = text[i]
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                self.pos = i + 1
                try:
                    # Models emit raw newlines inside strings often enough
                    return json.loads(text[start : i + 1], strict=False)
                except json.JSONDecodeError as e:
                    raise PartialJSONError(str(e)) from e
            i += 1
        raise _Truncated()

    def _number(self):
        text = self.text
        start = self.pos
        i = start
        while i < len(text) and text[i] in _NUMBER_CHARS:
            i += 1
        if i >= len(text):
            # More digits may still arrive
            raise _Truncated()
        self.pos = i
        try:
            return json.loads(text[start:i])
        except json.JSONDecodeError as e:
            raise PartialJSONError(f"bad number {text[start:i]!r}") from e

    def _literal(self):
        rest = self.text[self.pos:]
        for word, value in _LITERALS:
            if rest.startswith(word):
                self.pos += len(word)
                return value
            if word.startswith(rest):
                raise _Truncated()
        raise self._error(f"unexpected character {rest[0]!r}")


def parse_partial_json(text: str):
    """Return the value of the JSON object that *text* begins, as far as known.

    Anything before the first ``{`` (chatter, a code fence) is skipped and
    anything after the object closes is ignored.  Returns ``None`` if no
    object has started yet.
    """
    start = text.find("{")
    if start < 0:
        return None
    try:
        return _Decoder(text, start).value()
    except _Truncated as exc:
        return exc.partial
