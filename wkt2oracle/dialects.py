"""
Dialect dispatch for spatial SQL generation.

Each supported database is an entry in a table keyed by the Dialect enum:
how to turn a geometry literal into SQL and which DDL builders to use for
spatial indexes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from .sdo_constructor import OracleGeometryConverter
from .spatial_index import (
    CreateSpatialIndexStatement,
    DropSpatialIndexStatement,
    drop_table_sql,
    mysql_create_spatial_index,
    mysql_drop_spatial_index,
    oracle_create_spatial_index,
    oracle_drop_spatial_index,
    oracle_drop_spatial_table,
    postgres_create_spatial_index,
    postgres_drop_spatial_index,
)
from .srid_cache import get_oracle_srid_expression
from .wkt_info import get_wkt_info
from .wkt_parser import ensure_no_quotes, parse_wkt

logger = logging.getLogger(__name__)


class Dialect(Enum):
    """Target databases; values double as sqlglot dialect names."""
    ORACLE = "oracle"
    POSTGRESQL = "postgres"
    MYSQL = "mysql"

    @classmethod
    def from_name(cls, name: Union[str, "Dialect"]) -> "Dialect":
        if isinstance(name, Dialect):
            return name
        key = name.strip().lower()
        aliases = {"postgresql": "postgres", "postgis": "postgres", "pg": "postgres"}
        key = aliases.get(key, key)
        for dialect in cls:
            if dialect.value == key:
                return dialect
        raise ValueError(
            f"Unsupported dialect '{name}'. Choose one of: "
            + ", ".join(d.value for d in cls)
        )


@dataclass(frozen=True)
class DialectProfile:
    """Per-dialect settings for converting geometry literals."""
    geom_from_text_function: str
    srid_required: bool
    create_spatial_index: Callable[[CreateSpatialIndexStatement], List[str]]
    drop_spatial_index: Callable[[DropSpatialIndexStatement], List[str]]


DIALECT_PROFILES: Dict[Dialect, DialectProfile] = {
    Dialect.ORACLE: DialectProfile(
        geom_from_text_function="SDO_GEOMETRY",
        srid_required=False,
        create_spatial_index=oracle_create_spatial_index,
        drop_spatial_index=oracle_drop_spatial_index,
    ),
    Dialect.POSTGRESQL: DialectProfile(
        geom_from_text_function="ST_GeomFromText",
        srid_required=False,
        create_spatial_index=postgres_create_spatial_index,
        drop_spatial_index=postgres_drop_spatial_index,
    ),
    Dialect.MYSQL: DialectProfile(
        geom_from_text_function="ST_GeomFromText",
        srid_required=False,
        create_spatial_index=mysql_create_spatial_index,
        drop_spatial_index=mysql_drop_spatial_index,
    ),
}


def convert_to_function(wkt: str, srid: Union[int, str, None],
                        function_name: str, srid_required: bool = False) -> str:
    """
    Wrap WKT in a geometry-from-text call: ``FUNC('<wkt>'[, srid])``.

    Args:
        wkt: WKT text without an SRID prefix
        srid: Optional SRID appended as the second argument
        function_name: e.g. ``ST_GeomFromText``
        srid_required: Reject calls without an SRID

    Returns:
        The function call SQL

    Raises:
        ValueError: If the WKT is empty or a required SRID is missing
    """
    if not wkt:
        raise ValueError("The Well-Known Text cannot be null or empty")
    ensure_no_quotes(wkt)
    function = f"{function_name}('{wkt}'"
    if srid is not None and str(srid).strip():
        function += f", {srid}"
    elif srid_required:
        raise ValueError(
            f"An SRID was not provided with '{wkt}' but is required in call to '{function_name}'"
        )
    return function + ")"


class SpatialSqlGenerator:
    """
    Entry point for generating spatial SQL in one dialect.

    Args:
        dialect: Target database
        srid_resolver: EPSG -> Oracle SRID resolver (Oracle only)
        array_limit: Oracle array size from which the XML form is used
        clob_limit: Oracle string literal length limit
    """

    def __init__(self, dialect: Union[str, Dialect] = Dialect.ORACLE, srid_resolver=None,
                 array_limit: int = 900, clob_limit: int = 4000):
        self.dialect = Dialect.from_name(dialect)
        self.profile = DIALECT_PROFILES[self.dialect]
        self.srid_resolver = srid_resolver
        self.oracle_converter = OracleGeometryConverter(
            srid_resolver=srid_resolver,
            array_limit=array_limit,
            clob_limit=clob_limit,
        )

    @property
    def sqlglot_dialect(self) -> str:
        return self.dialect.value

    def convert_value(self, value: str, srid: Union[int, str, None] = None) -> str:
        """
        Convert a WKT/EWKT literal into the dialect's geometry SQL.

        Args:
            value: WKT or EWKT literal
            srid: SRID overriding the literal's ``SRID=`` prefix

        Returns:
            SQL expression

        Raises:
            GrammarError: If the literal is invalid
            ValueError: If the dialect requires an SRID and none is known
        """
        if self.dialect is Dialect.ORACLE:
            return self.oracle_converter.convert(value, srid)

        info = get_wkt_info(value)
        parse_wkt(info.wkt_without_srid)
        effective_srid = srid if srid is not None and str(srid).strip() else info.srid
        return convert_to_function(
            info.wkt_without_srid,
            effective_srid,
            self.profile.geom_from_text_function,
            self.profile.srid_required,
        )

    def create_spatial_index(self, statement: CreateSpatialIndexStatement) -> List[str]:
        if self.dialect is Dialect.ORACLE:
            return oracle_create_spatial_index(statement, self._srid_expression)
        return self.profile.create_spatial_index(statement)

    def drop_spatial_index(self, statement: DropSpatialIndexStatement) -> List[str]:
        return self.profile.drop_spatial_index(statement)

    def drop_spatial_table(self, table_name: str, table_schema_name: Optional[str] = None,
                           table_catalog_name: Optional[str] = None) -> List[str]:
        if self.dialect is Dialect.ORACLE:
            return oracle_drop_spatial_table(table_name, table_schema_name, table_catalog_name)
        return drop_table_sql(table_name, self.sqlglot_dialect, table_schema_name, table_catalog_name)

    def _srid_expression(self, srid: Union[int, str]) -> str:
        # A database resolver gives the literal Oracle SRID; otherwise inline the lookup
        if self.srid_resolver is not None:
            resolved = self.srid_resolver.get_oracle_srid(srid)
            if resolved:
                return resolved
        return get_oracle_srid_expression(srid)
