"""
Exception types raised while compiling WKT/EWKT literals into spatial SQL.

Every conversion either produces a complete SQL expression or raises one of
these errors; nothing is ever returned half-built.
"""


class SpatialConversionError(ValueError):
    """Base class for all WKT conversion failures."""


class GrammarError(SpatialConversionError):
    """
    Malformed or unsupported WKT text.

    Raised for unknown geometry keywords, missing or unbalanced parentheses,
    wrong coordinate arity, ``NaN`` literals and ``EMPTY`` geometries.
    """

    def __init__(self, message: str, position: int = None):
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class DimensionMismatchError(GrammarError):
    """A collection member declares different Z/M qualifiers than its collection."""


class NumericFormatError(GrammarError):
    """A coordinate token could not be read as a finite number."""


class SridResolutionError(SpatialConversionError):
    """The database lookup of an Oracle SRID failed."""

    def __init__(self, message: str, srid: str = None):
        self.srid = srid
        super().__init__(message)


class ParserReuseError(RuntimeError):
    """A single-use parser instance was asked to parse a second time."""
