"""
WKT/EWKT to Oracle SDO_GEOMETRY compiler.

This package turns Well-Known Text geometry literals into Oracle Spatial
SQL (SDO_GEOMETRY constructors with element info and ordinate arrays),
resolves EPSG SRIDs to Oracle SRIDs and generates spatial index DDL for
Oracle, PostgreSQL and MySQL.
"""

from .errors import (
    DimensionMismatchError,
    GrammarError,
    NumericFormatError,
    ParserReuseError,
    SpatialConversionError,
    SridResolutionError,
)
from .wkt_info import WktInfo, get_wkt_info, match_ewkt
from .wkt_parser import ParsedGeometry, WktCoordinatesParser, parse_wkt
from .gtype import get_layer_gtype, get_sdo_gtype
from .sdo_constructor import OracleGeometryConverter, split_string_into_clobs, to_sdo_array
from .srid_cache import (
    ExpressionSridResolver,
    OracleSridResolver,
    SridCache,
    connection_query_executor,
    get_oracle_srid_expression,
)
from .spatial_index import CreateSpatialIndexStatement, DropSpatialIndexStatement
from .dialects import Dialect, SpatialSqlGenerator
from .config import ConversionConfig, load_config
from .statement_rewriter import RewriteResult, SpatialStatementRewriter

__version__ = "0.1.0"
__all__ = [
    "DimensionMismatchError",
    "GrammarError",
    "NumericFormatError",
    "ParserReuseError",
    "SpatialConversionError",
    "SridResolutionError",
    "WktInfo",
    "get_wkt_info",
    "match_ewkt",
    "ParsedGeometry",
    "WktCoordinatesParser",
    "parse_wkt",
    "get_layer_gtype",
    "get_sdo_gtype",
    "OracleGeometryConverter",
    "split_string_into_clobs",
    "to_sdo_array",
    "ExpressionSridResolver",
    "OracleSridResolver",
    "SridCache",
    "connection_query_executor",
    "get_oracle_srid_expression",
    "CreateSpatialIndexStatement",
    "DropSpatialIndexStatement",
    "Dialect",
    "SpatialSqlGenerator",
    "ConversionConfig",
    "load_config",
    "RewriteResult",
    "SpatialStatementRewriter",
]
