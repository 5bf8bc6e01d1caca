"""
Spatial index DDL.

Oracle needs more than a CREATE INDEX: every indexed geometry column must be
registered in ``user_sdo_geom_metadata`` with its dimension bounds and SRID
first, and that row has to be removed again when the index or table goes
away. PostgreSQL (GiST) and MySQL (SPATIAL) only need the index statement.

Identifiers are rendered through sqlglot so each dialect gets its own
quoting rules.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from sqlglot import exp

from .gtype import get_layer_gtype
from .srid_cache import get_oracle_srid_expression
from .wkt_info import has_m_geometry_type, has_z_geometry_type

logger = logging.getLogger(__name__)


METADATA_VIEW = "user_sdo_geom_metadata"
ORACLE_INDEX_TYPE = "mdsys.spatial_index"

GEODETIC_DIM_ELEMENTS = (
    "SDO_DIM_ELEMENT('Longitude', -180, 180, 0.005), "
    "SDO_DIM_ELEMENT('Latitude', -90, 90, 0.005)"
)
# Bounds of the UTM zones
PROJECTED_DIM_ELEMENTS = (
    "SDO_DIM_ELEMENT('X', 0.0, 41000000.0, 0.5), "
    "SDO_DIM_ELEMENT('Y', 0.0, 9300000.0, 0.5)"
)
Z_DIM_ELEMENT = "SDO_DIM_ELEMENT('Z', -10000000, 10000000, 0.5)"
M_DIM_ELEMENT = "SDO_DIM_ELEMENT('M', -10000000, 10000000, 0.5)"


@dataclass
class CreateSpatialIndexStatement:
    """Description of a spatial index to create."""
    index_name: str
    table_name: str
    columns: List[str]
    table_catalog_name: Optional[str] = None
    table_schema_name: Optional[str] = None
    tablespace: Optional[str] = None
    geometry_type: Optional[str] = None  # OGC type name, e.g. "Point" or "LineString Z"
    srid: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.columns, str):
            self.columns = [self.columns]
        validate_index_statement(self.table_name, self.columns)


@dataclass
class DropSpatialIndexStatement:
    """Description of a spatial index to drop."""
    index_name: str
    table_name: str
    column_name: str
    table_catalog_name: Optional[str] = None
    table_schema_name: Optional[str] = None

    def __post_init__(self):
        if not self.index_name or not self.index_name.strip():
            raise ValueError("indexName is required")
        validate_index_statement(self.table_name, [self.column_name])


def validate_index_statement(table_name: Optional[str], columns: Optional[List[str]]) -> None:
    """Raise ValueError when the table or its columns are missing."""
    if not table_name or not table_name.strip():
        raise ValueError("tableName is required")
    if not columns or not all(c and c.strip() for c in columns):
        raise ValueError("columns is required")


def correct_object_name(name: str) -> str:
    """
    Normalise a name the way Oracle stores it in the data dictionary.

    Unquoted names are upper-cased; ``"quoted"`` names keep their case.
    """
    name = name.strip()
    if len(name) > 1 and name.startswith('"') and name.endswith('"'):
        return name[1:-1]
    return name.upper()


def _owner(catalog: Optional[str], schema: Optional[str]) -> Optional[str]:
    # Oracle has no catalogs; a catalog name stands for the owning schema
    return catalog or schema or None


def _to_identifier(name: str) -> exp.Identifier:
    name = name.strip()
    if len(name) > 1 and name.startswith('"') and name.endswith('"'):
        return exp.to_identifier(name[1:-1], quoted=True)
    return exp.to_identifier(name)


def _identifier(name: str, dialect: str) -> str:
    return _to_identifier(name).sql(dialect=dialect)


def _table(name: str, owner: Optional[str], dialect: str) -> str:
    table = exp.Table(this=_to_identifier(name), db=_to_identifier(owner) if owner else None)
    return table.sql(dialect=dialect)


# ----------------------------------------------------------------------
# Oracle
# ----------------------------------------------------------------------

def oracle_delete_metadata_sql(table_name: str, column_name: Optional[str] = None) -> str:
    """
    DELETE of the ``user_sdo_geom_metadata`` row(s) of a table or column.

    Args:
        table_name: Table name as written in the DDL
        column_name: Geometry column; all of the table's rows when omitted

    Returns:
        The DELETE statement
    """
    sql = f"DELETE FROM {METADATA_VIEW} WHERE table_name = '{correct_object_name(table_name)}'"
    if column_name is not None:
        sql += f" AND column_name = '{correct_object_name(column_name)}'"
    return sql


def sdo_dim_array(projected: bool, has_z: bool, has_m: bool) -> str:
    """Build the SDO_DIM_ARRAY for geodetic or projected coordinates."""
    sql = "SDO_DIM_ARRAY("
    sql += PROJECTED_DIM_ELEMENTS if projected else GEODETIC_DIM_ELEMENTS
    if has_z:
        sql += "," + Z_DIM_ELEMENT
    if has_m:
        sql += "," + M_DIM_ELEMENT
    return sql + ")"


def oracle_insert_metadata_sql(
    statement: CreateSpatialIndexStatement,
    srid_expression: Callable[[Union[int, str]], str] = get_oracle_srid_expression,
) -> str:
    """
    INSERT registering the indexed column in ``user_sdo_geom_metadata``.

    Without an SRID the geodetic bounds are used and the SRID is NULL. With
    an SRID the bounds are chosen in SQL from the SRID's
    ``COORD_REF_SYS_KIND`` so no database round trip is needed here.

    Args:
        statement: The index being created
        srid_expression: Maps the EPSG SRID to Oracle SRID SQL

    Returns:
        The INSERT statement
    """
    has_z = has_z_geometry_type(statement.geometry_type)
    has_m = has_m_geometry_type(statement.geometry_type)

    sql = f"INSERT INTO {METADATA_VIEW} (table_name, column_name, diminfo, srid) "
    sql += f"VALUES ('{correct_object_name(statement.table_name)}', "
    sql += f"'{correct_object_name(statement.columns[0])}', "

    if statement.srid is None:
        sql += sdo_dim_array(False, has_z, has_m)
        sql += ", NULL"
    else:
        oracle_srid = srid_expression(statement.srid)
        sql += f"CASE (SELECT COORD_REF_SYS_KIND from SDO_COORD_REF_SYSTEM where srid = {oracle_srid})"
        sql += " WHEN 'PROJECTED' THEN "
        sql += sdo_dim_array(True, has_z, has_m)
        sql += " ELSE "
        sql += sdo_dim_array(False, has_z, has_m)
        sql += " END "
        sql += f", {oracle_srid}"
    return sql + ")"


def oracle_index_parameters(statement: CreateSpatialIndexStatement) -> List[str]:
    parameters = []
    if statement.geometry_type and statement.geometry_type.strip():
        layer_gtype = get_layer_gtype(statement.geometry_type)
        if layer_gtype is not None:
            parameters.append(f"layer_gtype={layer_gtype}")
    if statement.tablespace and statement.tablespace.strip():
        parameters.append(f"tablespace={statement.tablespace.strip()}")
    return parameters


def oracle_create_index_sql(statement: CreateSpatialIndexStatement) -> str:
    """CREATE INDEX ... INDEXTYPE IS mdsys.spatial_index [PARAMETERS (...)]."""
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    sql = "CREATE INDEX "
    sql += _table(statement.index_name, owner, "oracle")
    sql += " ON " + _table(statement.table_name, owner, "oracle")
    # Oracle spatial indexes cover exactly one column
    sql += f" ({_identifier(statement.columns[0], 'oracle')})"
    sql += f" INDEXTYPE IS {ORACLE_INDEX_TYPE}"

    parameters = oracle_index_parameters(statement)
    if parameters:
        sql += f" PARAMETERS ('{' '.join(parameters)}')"
    return sql


def oracle_create_spatial_index(
    statement: CreateSpatialIndexStatement,
    srid_expression: Callable[[Union[int, str]], str] = get_oracle_srid_expression,
) -> List[str]:
    """
    Statements creating an Oracle spatial index.

    Returns:
        [DELETE metadata, INSERT metadata, CREATE INDEX]
    """
    if len(statement.columns) > 1:
        logger.warning(
            "Oracle spatial indexes use a single column; ignoring %s",
            ", ".join(statement.columns[1:]),
        )
    return [
        oracle_delete_metadata_sql(statement.table_name, statement.columns[0]),
        oracle_insert_metadata_sql(statement, srid_expression),
        oracle_create_index_sql(statement),
    ]


def oracle_drop_spatial_index(statement: DropSpatialIndexStatement) -> List[str]:
    """[DELETE metadata, DROP INDEX]"""
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    return [
        oracle_delete_metadata_sql(statement.table_name, statement.column_name),
        f"DROP INDEX {_table(statement.index_name, owner, 'oracle')}",
    ]


def oracle_drop_spatial_table(table_name: str, table_schema_name: Optional[str] = None,
                              table_catalog_name: Optional[str] = None) -> List[str]:
    """[DELETE metadata of every column, DROP TABLE]"""
    owner = _owner(table_catalog_name, table_schema_name)
    return [
        oracle_delete_metadata_sql(table_name),
        f"DROP TABLE {_table(table_name, owner, 'oracle')}",
    ]


# ----------------------------------------------------------------------
# PostgreSQL / MySQL
# ----------------------------------------------------------------------

def postgres_create_spatial_index(statement: CreateSpatialIndexStatement) -> List[str]:
    """CREATE INDEX ... USING GIST over every listed column."""
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    columns = ", ".join(_identifier(c, "postgres") for c in statement.columns)
    sql = f"CREATE INDEX {_identifier(statement.index_name, 'postgres')}"
    sql += f" ON {_table(statement.table_name, owner, 'postgres')} USING GIST ({columns})"
    return [sql]


def postgres_drop_spatial_index(statement: DropSpatialIndexStatement) -> List[str]:
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    return [f"DROP INDEX {_table(statement.index_name, owner, 'postgres')}"]


def mysql_create_spatial_index(statement: CreateSpatialIndexStatement) -> List[str]:
    """CREATE SPATIAL INDEX on the first column only."""
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    sql = f"CREATE SPATIAL INDEX {_identifier(statement.index_name, 'mysql')}"
    sql += f" ON {_table(statement.table_name, owner, 'mysql')}"
    sql += f"({_identifier(statement.columns[0], 'mysql')})"
    return [sql]


def mysql_drop_spatial_index(statement: DropSpatialIndexStatement) -> List[str]:
    owner = _owner(statement.table_catalog_name, statement.table_schema_name)
    return [
        f"DROP INDEX {_identifier(statement.index_name, 'mysql')}"
        f" ON {_table(statement.table_name, owner, 'mysql')}"
    ]


def drop_table_sql(table_name: str, dialect: str, table_schema_name: Optional[str] = None,
                   table_catalog_name: Optional[str] = None) -> List[str]:
    owner = _owner(table_catalog_name, table_schema_name)
    return [f"DROP TABLE {_table(table_name, owner, dialect)}"]
