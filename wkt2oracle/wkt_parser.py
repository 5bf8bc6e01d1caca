"""
Recursive-descent parser for WKT geometry text.

Walks the POINT / LINESTRING / POLYGON / MULTI* / GEOMETRYCOLLECTION grammar
and emits the two arrays Oracle's SDO_GEOMETRY constructor needs:

- element info: (offset, etype, interpretation) triplets, where offset is the
  1-based position in the ordinate array where the element starts
- ordinates: the flat coordinate values, kept as their original text so no
  precision is lost on the way through

Example:
    >>> parse_wkt("POLYGON((10 10,20 20,30 30,10 10),(1 1,2 2,1 1))").elem_info
    (1, 1003, 1, 9, 2003, 1)
"""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .errors import DimensionMismatchError, GrammarError, NumericFormatError, ParserReuseError

logger = logging.getLogger(__name__)


# SDO_ETYPE values
ETYPE_POINT = 1
ETYPE_LINESTRING = 2
ETYPE_POLYGON_EXTERIOR = 1003
ETYPE_POLYGON_INTERIOR = 2003

# Only straight-line segments are produced
INTERPRETATION_SIMPLE = 1

EMPTY = "EMPTY"
NAN_SYMBOL = "NAN"

# Plain ASCII decimal with optional exponent
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class TokenKind(Enum):
    WORD = "word"
    L_PAREN = "("
    R_PAREN = ")"
    COMMA = ","
    OTHER = "other"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


def _is_word_char(ch: str) -> bool:
    return (
        ("a" <= ch <= "z")
        or ("A" <= ch <= "Z")
        or ("0" <= ch <= "9")
        or ch in "+-."
        or "\u00a0" <= ch <= "\u00ff"
    )


def ensure_no_quotes(text: str) -> None:
    """
    Reject WKT holding a single quote anywhere, comments included.

    The text is spliced between the quotes of a SQL string literal.

    Raises:
        GrammarError: At the position of the first quote
    """
    position = text.find("'")
    if position >= 0:
        raise GrammarError("Invalid WKT: single quotes are not allowed", position)


def tokenize(text: str) -> Iterator[Token]:
    """
    Split WKT text into structural tokens.

    Words are runs of letters, digits, ``+``, ``-`` and ``.``; any character
    up to and including a space separates tokens, and ``#`` starts a comment
    that runs to the end of the line.

    Args:
        text: WKT text without an SRID prefix

    Yields:
        Token objects in source order
    """
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if ch <= " ":
            i += 1
        elif ch == "#":
            while i < length and text[i] not in "\r\n":
                i += 1
        elif _is_word_char(ch):
            start = i
            while i < length and _is_word_char(text[i]):
                i += 1
            yield Token(TokenKind.WORD, text[start:i], start)
        elif ch == "(":
            yield Token(TokenKind.L_PAREN, ch, i)
            i += 1
        elif ch == ")":
            yield Token(TokenKind.R_PAREN, ch, i)
            i += 1
        elif ch == ",":
            yield Token(TokenKind.COMMA, ch, i)
            i += 1
        else:
            yield Token(TokenKind.OTHER, ch, i)
            i += 1


@dataclass(frozen=True)
class ParsedGeometry:
    """Element info and ordinate arrays for one geometry."""
    elem_info: Tuple[int, ...]
    ordinates: Tuple[str, ...]
    dimensions: int
    geometry_type: str

    def triplets(self) -> List[Tuple[int, int, int]]:
        """Group the element info into (offset, etype, interpretation) triplets."""
        values = self.elem_info
        return [tuple(values[i:i + 3]) for i in range(0, len(values), 3)]


class WktCoordinatesParser:
    """
    Single-use parser turning WKT text into SDO element info and ordinates.

    The instance holds the token cursor and the two output arrays for the
    duration of one ``parse()`` call. Create a new instance for each geometry;
    calling ``parse()`` twice raises ParserReuseError.
    """

    def __init__(self, wkt: str):
        self.wkt = wkt
        self._tokens: List[Token] = []
        self._pos = 0
        self._elem_info: List[int] = []
        self._ordinates: List[str] = []
        self._used = False

    def parse(self) -> ParsedGeometry:
        """
        Parse the WKT text.

        Returns:
            ParsedGeometry with the element info and ordinate arrays

        Raises:
            GrammarError: On malformed or unsupported WKT
            DimensionMismatchError: When a collection member's Z/M differs
            NumericFormatError: When a coordinate is not a finite number
            ParserReuseError: If this instance already parsed something
        """
        if self._used:
            raise ParserReuseError("Already processing. Use a new instance.")
        self._used = True

        ensure_no_quotes(self.wkt)
        self._tokens = list(tokenize(self.wkt))
        geometry_type, dimensions = self._read_geometry_tagged_text(None)

        trailing = self._peek()
        if trailing is not None:
            raise GrammarError(
                f"Invalid WKT: unexpected text after geometry: {trailing.text!r}",
                trailing.position,
            )

        logger.debug(
            "Parsed %s: %d element info values, %d ordinates",
            geometry_type, len(self._elem_info), len(self._ordinates),
        )
        return ParsedGeometry(
            elem_info=tuple(self._elem_info),
            ordinates=tuple(self._ordinates),
            dimensions=dimensions,
            geometry_type=geometry_type,
        )

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def _peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise GrammarError("Invalid WKT: unexpected end of text", len(self.wkt))
        self._pos += 1
        return token

    def _next_opener(self) -> Token:
        token = self._next()
        if token.kind is TokenKind.L_PAREN:
            return token
        if token.kind is TokenKind.WORD and token.text.upper() == EMPTY:
            raise GrammarError("Empty geometries not supported", token.position)
        raise GrammarError(f"Invalid WKT: {EMPTY} or ( expected", token.position)

    def _next_closer(self) -> Token:
        token = self._next()
        if token.kind is TokenKind.R_PAREN:
            return token
        raise GrammarError("Invalid WKT: ) expected", token.position)

    def _next_closer_or_comma(self) -> Token:
        token = self._next()
        if token.kind in (TokenKind.COMMA, TokenKind.R_PAREN):
            return token
        raise GrammarError("Invalid WKT: , or ) expected", token.position)

    def _next_number(self) -> str:
        token = self._next()
        if token.kind is not TokenKind.WORD:
            raise GrammarError("Invalid WKT: Expected number", token.position)
        if token.text.upper() == NAN_SYMBOL:
            raise GrammarError("Invalid WKT: NaN not supported", token.position)
        if not NUMBER_PATTERN.fullmatch(token.text):
            raise NumericFormatError(f"Invalid WKT: Invalid number: {token.text}", token.position)
        if not math.isfinite(float(token.text)):
            raise NumericFormatError(f"Invalid WKT: Invalid number: {token.text}", token.position)
        # Keep the original text
        return token.text

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def _read_geometry_tagged_text(self, parent_dimensions: Optional[int]) -> Tuple[str, int]:
        token = self._next()
        if token.kind is not TokenKind.WORD:
            raise GrammarError("Invalid WKT: geometry type expected", token.position)

        geometry_type = token.text.upper()
        dimensions = 2

        lookahead = self._peek()
        if lookahead is None:
            raise GrammarError("Invalid WKT: expected '(', 'Z', 'ZM' or 'M'", len(self.wkt))
        if lookahead.kind is TokenKind.L_PAREN:
            # Qualifier attached to the keyword, e.g. POINTZM
            if geometry_type.endswith("M"):
                geometry_type = geometry_type[:-1]
                dimensions += 1
            if geometry_type.endswith("Z"):
                geometry_type = geometry_type[:-1]
                dimensions += 1
        else:
            qualifier = self._next()
            if qualifier.kind is TokenKind.WORD and qualifier.text.upper() == "ZM":
                dimensions += 2
            elif qualifier.kind is TokenKind.WORD and qualifier.text.upper() in ("Z", "M"):
                dimensions += 1
            elif qualifier.kind is TokenKind.WORD and qualifier.text.upper() == EMPTY:
                raise GrammarError("Empty geometries not supported", qualifier.position)
            else:
                raise GrammarError(
                    f"Invalid WKT: Unexpected string: {qualifier.text}", qualifier.position
                )

        # Only the immediate parent collection is compared
        if parent_dimensions is not None and parent_dimensions != dimensions:
            raise DimensionMismatchError(
                "Invalid WKT: Mixed geometries with different dimensions", token.position
            )

        reader = self._readers.get(geometry_type)
        if reader is None:
            raise GrammarError(f"Unknown geometry type: {token.text}", token.position)
        reader(self, dimensions)
        return geometry_type, dimensions

    def _current_offset(self) -> int:
        return len(self._ordinates) + 1

    def _add_element_info(self, etype: int) -> None:
        self._elem_info.extend((self._current_offset(), etype, INTERPRETATION_SIMPLE))

    def _load_coordinate(self, dimensions: int) -> None:
        for _ in range(dimensions):
            self._ordinates.append(self._next_number())

    def _load_coordinates(self, dimensions: int) -> int:
        """Read comma-separated tuples up to and including the closing paren."""
        count = 0
        while True:
            self._load_coordinate(dimensions)
            count += 1
            if self._next_closer_or_comma().kind is TokenKind.R_PAREN:
                return count

    def _read_point_text(self, dimensions: int) -> None:
        self._next_opener()
        self._add_element_info(ETYPE_POINT)
        self._load_coordinate(dimensions)
        self._next_closer()

    def _read_line_string_text(self, dimensions: int) -> None:
        self._next_opener()
        self._add_element_info(ETYPE_LINESTRING)
        self._load_coordinates(dimensions)

    def _read_polygon_text(self, dimensions: int) -> None:
        self._next_opener()
        # Exterior ring
        self._next_opener()
        self._add_element_info(ETYPE_POLYGON_EXTERIOR)
        self._load_coordinates(dimensions)
        # Holes
        while self._next_closer_or_comma().kind is TokenKind.COMMA:
            self._next_opener()
            self._add_element_info(ETYPE_POLYGON_INTERIOR)
            self._load_coordinates(dimensions)

    def _read_multi_point_text(self, dimensions: int) -> None:
        self._next_opener()
        while True:
            # Both MULTIPOINT(1 1, 2 2) and MULTIPOINT((1 1), (2 2))
            token = self._peek()
            wrapped = token is not None and token.kind is TokenKind.L_PAREN
            if wrapped:
                self._next()
            self._add_element_info(ETYPE_POINT)
            self._load_coordinate(dimensions)
            if wrapped:
                self._next_closer()
            if self._next_closer_or_comma().kind is TokenKind.R_PAREN:
                return

    def _read_multi_line_string_text(self, dimensions: int) -> None:
        self._next_opener()
        while True:
            self._read_line_string_text(dimensions)
            if self._next_closer_or_comma().kind is TokenKind.R_PAREN:
                return

    def _read_multi_polygon_text(self, dimensions: int) -> None:
        self._next_opener()
        while True:
            self._read_polygon_text(dimensions)
            if self._next_closer_or_comma().kind is TokenKind.R_PAREN:
                return

    def _read_geometry_collection_text(self, dimensions: int) -> None:
        self._next_opener()
        while True:
            self._read_geometry_tagged_text(dimensions)
            if self._next_closer_or_comma().kind is TokenKind.R_PAREN:
                return

    _readers = {
        "POINT": _read_point_text,
        "LINESTRING": _read_line_string_text,
        "POLYGON": _read_polygon_text,
        "MULTIPOINT": _read_multi_point_text,
        "MULTILINESTRING": _read_multi_line_string_text,
        "MULTIPOLYGON": _read_multi_polygon_text,
        "GEOMETRYCOLLECTION": _read_geometry_collection_text,
    }


def parse_wkt(wkt: str) -> ParsedGeometry:
    """Parse WKT text (no SRID prefix) with a fresh parser instance."""
    return WktCoordinatesParser(wkt).parse()
