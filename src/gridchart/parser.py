from __future__ import annotations

import logging
import re

from .errors import ChartSyntaxError, MisplacedTextShorthandError
from .types import (
    SIDES,
    Attribute,
    ConnectionSpec,
    DefineEntry,
    Destination,
    Document,
    LabelRef,
    Occurrence,
    RelativeRef,
    SelfRef,
    Cell,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Flowchart DSL parser
#
# Hand-written recursive descent over the raw text. Whitespace and `//`
# line comments may appear between any two tokens.
#
#   grid {
#     start("Begin", connect: s:n@s);
#     check#q(shape: diamond), _, done;
#   }
#   define {
#     check(class: "decision", connect: {e:w#end; s:n@s("no")});
#   }
# ============================================================================

IDENT_REGEX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
SPACE_REGEX = re.compile(r"(?:\s+|//[^\n]*)*")

EMPTY_CELL = "_"

STRING_ESCAPES = {'"': '"', "\\": "\\", "n": "\n"}

NODE_KEYS: tuple[str, ...] = ("text", "class", "shape", "connect")
CONNECTION_KEYS: tuple[str, ...] = ("text", "class", "arrowheads")

# Keys whose value is a bare keyword, checked later by the attribute resolver
KEYWORD_KEYS = {"shape", "arrowheads"}


def parse_document(text: str) -> Document:
    """Parse flowchart source text into a Document.

    Raises ChartSyntaxError (or MisplacedTextShorthandError) on malformed input.
    """
    document = _Parser(text).parse()
    logger.debug(
        "parsed %d grid rows and %d define entries",
        len(document.rows),
        len(document.definitions),
    )
    return document


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    # ========================================================================
    # Document structure
    # ========================================================================

    def parse(self) -> Document:
        rows: list[list[Cell]] | None = None
        definitions: list[DefineEntry] | None = None

        self._skip_space()
        while self.pos < len(self.text):
            start = self.pos
            keyword = self._identifier('"grid" or "define"')
            if keyword == "grid":
                if rows is not None:
                    raise self._error("a single grid block", start)
                rows = self._grid_block()
            elif keyword == "define":
                if definitions is not None:
                    raise self._error("a single define block", start)
                definitions = self._define_block()
            else:
                raise self._error('"grid" or "define"', start)
            self._skip_space()

        if rows is None:
            raise self._error('"grid" block')

        return Document(rows=rows, definitions=definitions or [])

    def _grid_block(self) -> list[list[Cell]]:
        self._expect("{")
        rows: list[list[Cell]] = []
        while not self._accept("}"):
            if self._at_end():
                raise self._error('"}"')
            rows.append(self._row())
        return rows

    def _row(self) -> list[Cell]:
        cells = [self._cell()]
        while True:
            if self._accept(";"):
                break
            self._expect(",", '"," or ";"')
            if self._accept(";"):
                break
            cells.append(self._cell())
        return cells

    def _cell(self) -> Cell:
        self._skip_space()
        line, column = self._location()
        identifier = self._identifier('node identifier or "_"')

        if identifier == EMPTY_CELL:
            if self._check("#") or self._check("("):
                raise self._error('"," or ";" after empty cell "_"')
            return None

        label = None
        if self._accept("#"):
            label = self._identifier("label name")

        attributes: list[Attribute] = []
        if self._check("("):
            attributes = self._attributes(NODE_KEYS)

        return Occurrence(
            identifier=identifier,
            label=label,
            attributes=attributes,
            line=line,
            column=column,
        )

    def _define_block(self) -> list[DefineEntry]:
        self._expect("{")
        entries: list[DefineEntry] = []
        while not self._accept("}"):
            if self._at_end():
                raise self._error('"}"')
            entries.append(self._define_entry())
        return entries

    def _define_entry(self) -> DefineEntry:
        self._skip_space()
        start = self.pos
        line, column = self._location()
        identifier = self._identifier("node identifier")
        if identifier == EMPTY_CELL:
            raise self._error("node identifier other than \"_\"", start)

        attributes = self._attributes(NODE_KEYS, allow_shorthand=False)
        self._expect(";")
        return DefineEntry(
            identifier=identifier,
            attributes=attributes,
            line=line,
            column=column,
        )

    # ========================================================================
    # Attribute lists
    # ========================================================================

    def _attributes(
        self, keys: tuple[str, ...], allow_shorthand: bool = True
    ) -> list[Attribute]:
        self._expect("(")
        items: list[Attribute] = []
        if self._accept(")"):
            return items

        seen_pair = False
        while True:
            item, shorthand = self._attribute(keys, allow_shorthand, seen_pair)
            seen_pair = seen_pair or not shorthand
            items.append(item)
            if self._accept(")"):
                break
            self._expect(",", '"," or ")"')
            if self._accept(")"):
                break
        return items

    def _attribute(
        self, keys: tuple[str, ...], allow_shorthand: bool, seen_pair: bool
    ) -> tuple[Attribute, bool]:
        self._skip_space()
        start = self.pos
        line, column = self._location()
        key_hint = f"attribute key ({', '.join(keys)})"

        if self._peek() == '"':
            if not allow_shorthand:
                raise self._error(key_hint)
            if seen_pair:
                raise MisplacedTextShorthandError(line, column)
            return Attribute("text", self._string(), line, column), True

        key = self._identifier(key_hint)
        if key not in keys:
            raise self._error(key_hint, start)
        self._expect(":")

        if key == "connect":
            value = self._connect_value()
        elif key in KEYWORD_KEYS:
            value = self._identifier(f"{key} keyword")
        else:
            value = self._string()
        return Attribute(key, value, line, column), False

    def _connect_value(self) -> list[ConnectionSpec]:
        if not self._accept("{"):
            return [self._connection()]

        specs: list[ConnectionSpec] = []
        if self._accept("}"):
            return specs
        specs.append(self._connection())
        while True:
            if self._accept("}"):
                break
            self._expect(";", '";" or "}"')
            if self._accept("}"):
                break
            specs.append(self._connection())
        return specs

    def _connection(self) -> ConnectionSpec:
        self._skip_space()
        line, column = self._location()
        source_side = self._side()
        self._expect(":")
        dest_side = self._side()

        destination: Destination
        if self._accept("#"):
            destination = LabelRef(self._identifier("label name"))
        elif self._accept("@"):
            self._skip_space()
            if IDENT_REGEX.match(self.text, self.pos):
                destination = RelativeRef(self._side())  # type: ignore[arg-type]
            else:
                destination = SelfRef()
        else:
            raise self._error('"#label", "@direction" or "@"')

        attributes: list[Attribute] = []
        if self._check("("):
            attributes = self._attributes(CONNECTION_KEYS)

        return ConnectionSpec(
            source_side=source_side,  # type: ignore[arg-type]
            dest_side=dest_side,  # type: ignore[arg-type]
            destination=destination,
            attributes=attributes,
            line=line,
            column=column,
        )

    def _side(self) -> str:
        self._skip_space()
        start = self.pos
        side = self._identifier("side (n, s, w or e)")
        if side not in SIDES:
            raise self._error("side (n, s, w or e)", start)
        return side

    # ========================================================================
    # Tokens
    # ========================================================================

    def _identifier(self, expected: str) -> str:
        self._skip_space()
        m = IDENT_REGEX.match(self.text, self.pos)
        if not m:
            raise self._error(expected)
        self.pos = m.end()
        return m.group(0)

    def _string(self) -> str:
        self._skip_space()
        if self._peek() != '"':
            raise self._error("quoted string")

        start = self.pos
        self.pos += 1
        chars: list[str] = []
        while True:
            if self.pos >= len(self.text):
                raise self._error('closing \'"\'', start)
            ch = self.text[self.pos]
            if ch == '"':
                self.pos += 1
                break
            if ch == "\\":
                escape = self.text[self.pos + 1 : self.pos + 2]
                if escape not in STRING_ESCAPES:
                    raise self._error('escape sequence (\\", \\\\ or \\n)')
                chars.append(STRING_ESCAPES[escape])
                self.pos += 2
                continue
            chars.append(ch)
            self.pos += 1
        return "".join(chars)

    # ========================================================================
    # Low-level helpers
    # ========================================================================

    def _skip_space(self) -> None:
        m = SPACE_REGEX.match(self.text, self.pos)
        if m:
            self.pos = m.end()

    def _at_end(self) -> bool:
        self._skip_space()
        return self.pos >= len(self.text)

    def _peek(self) -> str:
        return self.text[self.pos : self.pos + 1]

    def _check(self, char: str) -> bool:
        self._skip_space()
        return self._peek() == char

    def _accept(self, char: str) -> bool:
        if self._check(char):
            self.pos += 1
            return True
        return False

    def _expect(self, char: str, expected: str | None = None) -> None:
        if not self._accept(char):
            raise self._error(expected or f'"{char}"')

    def _location(self, pos: int | None = None) -> tuple[int, int]:
        if pos is None:
            pos = self.pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def _error(self, expected: str, pos: int | None = None) -> ChartSyntaxError:
        if pos is None:
            self._skip_space()
            pos = self.pos
        line, column = self._location(pos)
        m = IDENT_REGEX.match(self.text, pos)
        if m:
            found = m.group(0)
        elif pos < len(self.text):
            found = self.text[pos]
        else:
            found = "end of input"
        return ChartSyntaxError(pos, line, column, expected, found)
