"""
Rewrites INSERT and UPDATE statements that carry geometries as WKT strings.

A migration script often loads geometries as plain literals:

    INSERT INTO roads (id, geom) VALUES (1, 'SRID=4326;LINESTRING(0 0, 1 1)')

Databases do not accept that text in a geometry column, so each literal that
looks like WKT/EWKT is replaced with the target dialect's geometry SQL. The
statement is parsed and regenerated with sqlglot; everything other than the
geometry literals is left to sqlglot's round trip.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError

from .dialects import SpatialSqlGenerator
from .errors import SpatialConversionError
from .wkt_info import match_ewkt

logger = logging.getLogger(__name__)


def _scan_sql(sql: str, keep_comments: bool):
    """
    Walk SQL text yielding (char, in_code) pairs.

    ``in_code`` is False for characters inside string literals, quoted
    identifiers and comments. Comment characters are dropped unless
    ``keep_comments`` is set; their newlines are always kept.
    """
    i = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        if ch in ("'", '"'):
            quote = ch
            yield ch, True
            i += 1
            while i < length:
                yield sql[i], False
                if sql[i] == quote:
                    # Doubled quote is an escaped quote
                    if i + 1 < length and sql[i + 1] == quote:
                        yield sql[i + 1], False
                        i += 2
                        continue
                    i += 1
                    break
                i += 1
        elif sql.startswith("--", i):
            while i < length and sql[i] != "\n":
                if keep_comments:
                    yield sql[i], False
                i += 1
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = length if end == -1 else end + 2
            for c in sql[i:end]:
                if keep_comments or c == "\n":
                    yield c, False
            i = end
        else:
            yield ch, True
            i += 1


def strip_sql_comments(sql: str) -> str:
    """
    Remove ``--`` and ``/* */`` comments, leaving string literals intact.

    Args:
        sql: SQL text

    Returns:
        SQL text without comments; line breaks are preserved
    """
    if not sql:
        return sql
    return "".join(ch for ch, _ in _scan_sql(sql, keep_comments=False))


def split_statements_with_lines(script: str) -> List[Tuple[str, int]]:
    """
    Split a script on semicolons that are outside literals and comments.

    Args:
        script: SQL script

    Returns:
        List of (statement, line_number) with 1-based starting line numbers
    """
    statements = []
    current: List[str] = []
    line = 1
    start_line = None

    for ch, in_code in _scan_sql(script, keep_comments=True):
        if in_code and ch == ";":
            stmt = "".join(current).strip()
            if stmt:
                statements.append((stmt, start_line or line))
            current = []
            start_line = None
            continue
        if start_line is None and not ch.isspace():
            start_line = line
        current.append(ch)
        if ch == "\n":
            line += 1

    stmt = "".join(current).strip()
    if stmt:
        statements.append((stmt, start_line or line))
    return statements


@dataclass
class RewriteResult:
    """Result of rewriting one SQL statement."""
    original_sql: str
    rewritten_sql: str
    success: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    converted_values: int = 0
    line_number: Optional[int] = None  # Starting line number in source file

    def __str__(self) -> str:
        if self.success:
            return self.rewritten_sql
        return f"-- Rewrite failed: {'; '.join(self.errors)}\n-- Original SQL:\n{self.original_sql}"

    def get_detailed_report(self) -> str:
        """Generate a readable report of the rewrite result."""
        lines = []
        if not self.success:
            lines.append("=" * 60)
            lines.append("REWRITE FAILED")
            lines.append("=" * 60)
        if self.line_number:
            lines.append(f"Line: {self.line_number}")
        if self.errors:
            lines.append("\n[ERRORS]")
            for error in self.errors:
                lines.append(f"  ✗ {error}")
        if self.warnings:
            lines.append("\n[WARNINGS]")
            for warning in self.warnings:
                lines.append(f"  ⚠ {warning}")
        if not self.success:
            lines.append("\n[ORIGINAL SQL]")
            for i, line in enumerate(self.original_sql.split("\n"), 1):
                lines.append(f"  {i:3d} | {line}")
        else:
            lines.append(f"Converted geometry values: {self.converted_values}")
        return "\n".join(lines)


class SpatialStatementRewriter:
    """
    Replaces WKT/EWKT string literals in INSERT/UPDATE statements with
    geometry constructor SQL.

    Example:
        >>> rewriter = SpatialStatementRewriter(SpatialSqlGenerator("oracle"))
        >>> rewriter.rewrite("INSERT INTO t (g) VALUES ('POINT(1 2)')").rewritten_sql
        "INSERT INTO t (g) VALUES (SDO_GEOMETRY('POINT(1 2)'))"
    """

    def __init__(self, generator: SpatialSqlGenerator, pretty: bool = False):
        """
        Initialize the rewriter.

        Args:
            generator: Converts literals for the target dialect
            pretty: Whether to format output SQL with indentation
        """
        self.generator = generator
        self.pretty = pretty

    @property
    def dialect(self) -> str:
        return self.generator.sqlglot_dialect

    def rewrite(self, sql: str) -> RewriteResult:
        """
        Rewrite a single SQL statement.

        Statements other than INSERT and UPDATE are returned unchanged with a
        warning. A statement with an invalid geometry literal fails as a
        whole; no partially rewritten SQL is returned.

        Args:
            sql: SQL statement

        Returns:
            RewriteResult with the rewritten SQL or the errors
        """
        sql_without_comments = strip_sql_comments(sql.strip()).strip().rstrip(";").strip()
        if not sql_without_comments:
            return RewriteResult(original_sql=sql, rewritten_sql="", success=True)

        try:
            parsed = sqlglot.parse_one(sql_without_comments, dialect=self.dialect)
        except (ParseError, TokenError) as e:
            logger.error("Failed to parse statement: %s", e)
            return RewriteResult(
                original_sql=sql,
                rewritten_sql="",
                success=False,
                errors=[f"Parse error: {e}"],
            )

        if not isinstance(parsed, (exp.Insert, exp.Update)):
            return RewriteResult(
                original_sql=sql,
                rewritten_sql=sql_without_comments,
                success=True,
                warnings=[f"{parsed.key.upper()} statement left unchanged"],
            )

        try:
            converted = self._replace_geometry_literals(parsed)
        except SpatialConversionError as e:
            logger.error("Failed to convert geometry literal: %s", e)
            return RewriteResult(
                original_sql=sql,
                rewritten_sql="",
                success=False,
                errors=[f"Geometry conversion error: {e}"],
            )
        except ValueError as e:
            return RewriteResult(
                original_sql=sql,
                rewritten_sql="",
                success=False,
                errors=[str(e)],
            )

        warnings = []
        if converted == 0:
            warnings.append("No WKT geometry literals found")

        rewritten = parsed.sql(dialect=self.dialect, pretty=self.pretty)
        logger.debug("Rewrote %d geometry literal(s)", converted)
        return RewriteResult(
            original_sql=sql,
            rewritten_sql=rewritten,
            success=True,
            warnings=warnings,
            converted_values=converted,
        )

    def _value_expressions(self, statement: exp.Expression) -> List[exp.Expression]:
        """Expressions whose literals are candidate geometry values."""
        if isinstance(statement, exp.Insert):
            source = statement.expression
            return [source] if source is not None else []
        # UPDATE: only the right-hand side of SET assignments
        return [assignment.expression for assignment in statement.expressions
                if isinstance(assignment, exp.EQ)]

    def _replace_geometry_literals(self, statement: exp.Expression) -> int:
        candidates = []
        for value_expression in self._value_expressions(statement):
            if isinstance(value_expression, exp.Literal):
                literals = [value_expression]
            else:
                literals = list(value_expression.find_all(exp.Literal))
            for literal in literals:
                if not literal.is_string:
                    continue
                # Already wrapped, e.g. ST_GeomFromText('POINT(1 1)', 4326)
                if isinstance(literal.parent, exp.Func):
                    continue
                if match_ewkt(literal.this) is None:
                    continue
                candidates.append(literal)

        # Convert everything before touching the tree
        replacements = [(literal, self.generator.convert_value(literal.this)) for literal in candidates]
        for literal, geometry_sql in replacements:
            literal.replace(exp.Var(this=geometry_sql))
        return len(replacements)

    def rewrite_script(self, script: str) -> List[RewriteResult]:
        """
        Rewrite every statement in a script.

        Args:
            script: SQL script with ``;`` separated statements

        Returns:
            List of RewriteResult for each statement
        """
        results = []
        for stmt, line_num in split_statements_with_lines(script):
            if not strip_sql_comments(stmt).strip():
                continue
            result = self.rewrite(stmt)
            result.line_number = line_num
            results.append(result)
        return results

    def rewrite_file(self, input_path: str, output_path: Optional[str] = None) -> List[RewriteResult]:
        """
        Rewrite a SQL file.

        Args:
            input_path: Path to the input SQL file
            output_path: Optional path for the rewritten SQL

        Returns:
            List of RewriteResult for each statement
        """
        with open(input_path, "r", encoding="utf-8") as f:
            script = f.read()

        results = self.rewrite_script(script)

        if output_path:
            with open(output_path, "w", encoding="utf-8") as f:
                for result in results:
                    for warning in result.warnings:
                        f.write(f"-- WARNING: {warning}\n")
                    if result.success:
                        f.write(result.rewritten_sql)
                        f.write(";\n\n")
                    else:
                        f.write("-- REWRITE FAILED:\n")
                        for error in result.errors:
                            f.write(f"-- {error}\n")
                        f.write("-- Original SQL:\n")
                        for line in result.original_sql.split("\n"):
                            f.write(f"-- {line}\n")
                        f.write("\n")
            logger.info("Wrote %d statement(s) to %s", len(results), output_path)

        return results
