import pytest

from wkt2oracle.dialects import Dialect, SpatialSqlGenerator, convert_to_function
from wkt2oracle.errors import GrammarError
from wkt2oracle.spatial_index import CreateSpatialIndexStatement, DropSpatialIndexStatement
from wkt2oracle.srid_cache import ExpressionSridResolver, OracleSridResolver


class TestDialect:

    @pytest.mark.parametrize("name,dialect", [
        ("oracle", Dialect.ORACLE),
        (" ORACLE ", Dialect.ORACLE),
        ("postgres", Dialect.POSTGRESQL),
        ("PostgreSQL", Dialect.POSTGRESQL),
        ("postgis", Dialect.POSTGRESQL),
        ("pg", Dialect.POSTGRESQL),
        ("mysql", Dialect.MYSQL),
        (Dialect.MYSQL, Dialect.MYSQL),
    ])
    def test_from_name(self, name, dialect):
        assert Dialect.from_name(name) is dialect

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match="Unsupported dialect"):
            Dialect.from_name("h2")


class TestConvertToFunction:

    def test_without_srid(self):
        assert convert_to_function("POINT(1 2)", None, "ST_GeomFromText") == (
            "ST_GeomFromText('POINT(1 2)')"
        )

    def test_with_srid(self):
        assert convert_to_function("POINT(1 2)", 4326, "ST_GeomFromText") == (
            "ST_GeomFromText('POINT(1 2)', 4326)"
        )

    def test_required_srid(self):
        with pytest.raises(ValueError, match="is required"):
            convert_to_function("POINT(1 2)", None, "ST_GeomFromText", srid_required=True)

    def test_empty_wkt(self):
        with pytest.raises(ValueError):
            convert_to_function("", 4326, "ST_GeomFromText")

    def test_quote_in_wkt_is_rejected(self):
        with pytest.raises(GrammarError):
            convert_to_function("POINT(1 2)') ; DROP TABLE t; --", None, "ST_GeomFromText")


class TestSpatialSqlGenerator:

    def test_default_dialect_is_oracle(self):
        generator = SpatialSqlGenerator()
        assert generator.dialect is Dialect.ORACLE
        assert generator.sqlglot_dialect == "oracle"
        assert generator.convert_value("POINT(1 2)") == "SDO_GEOMETRY('POINT(1 2)')"

    def test_oracle_ewkt(self):
        generator = SpatialSqlGenerator(srid_resolver=ExpressionSridResolver())
        sql = generator.convert_value("SRID=4326;POINT Z(1 2 3)")
        assert sql.startswith("SDO_GEOMETRY(3001,COALESCE( SDO_CS.MAP_EPSG_SRID_TO_ORACLE(4326)")

    def test_postgres_keeps_ewkt_srid(self):
        generator = SpatialSqlGenerator("postgres")
        assert generator.convert_value("SRID=4326;POINT(1 2)") == (
            "ST_GeomFromText('POINT(1 2)', 4326)"
        )

    def test_mysql_explicit_srid_wins(self):
        generator = SpatialSqlGenerator("mysql")
        assert generator.convert_value("SRID=4326;POINT(1 2)", srid=3857) == (
            "ST_GeomFromText('POINT(1 2)', 3857)"
        )

    def test_non_oracle_validates_wkt(self):
        with pytest.raises(GrammarError):
            SpatialSqlGenerator("postgres").convert_value("POINT(1 2 3)")

    def test_non_oracle_rejects_quote_in_comment(self):
        with pytest.raises(GrammarError, match="single quotes"):
            SpatialSqlGenerator("postgres").convert_value("POINT(1 2 # x') ; DROP TABLE t; --\n)")

    def test_blank_srid_keeps_ewkt_srid(self):
        generator = SpatialSqlGenerator("postgres")
        assert generator.convert_value("SRID=4326;POINT(1 2)", srid=" ") == (
            "ST_GeomFromText('POINT(1 2)', 4326)"
        )

    def test_oracle_index_uses_resolved_srid(self, fake_executor):
        generator = SpatialSqlGenerator(srid_resolver=OracleSridResolver(fake_executor))
        statement = CreateSpatialIndexStatement("idx", "roads", ["geom"], srid=4326)
        statements = generator.create_spatial_index(statement)
        assert statements[1].endswith(" END , 8307)")

    def test_oracle_index_falls_back_to_expression(self):
        generator = SpatialSqlGenerator()
        statement = CreateSpatialIndexStatement("idx", "roads", ["geom"], srid=4326)
        statements = generator.create_spatial_index(statement)
        assert statements[1].endswith(
            ", COALESCE( SDO_CS.MAP_EPSG_SRID_TO_ORACLE(4326), "
            "(SELECT srid from SDO_COORD_REF_SYSTEM where srid = 4326)))"
        )

    def test_postgres_index(self):
        statement = CreateSpatialIndexStatement("idx", "roads", ["geom"])
        assert SpatialSqlGenerator("postgres").create_spatial_index(statement) == [
            "CREATE INDEX idx ON roads USING GIST (geom)"
        ]

    def test_drop_index_dispatch(self):
        statement = DropSpatialIndexStatement("idx", "roads", "geom")
        assert SpatialSqlGenerator("oracle").drop_spatial_index(statement)[1] == "DROP INDEX idx"
        assert SpatialSqlGenerator("mysql").drop_spatial_index(statement) == ["DROP INDEX idx ON roads"]

    def test_drop_table_dispatch(self):
        assert len(SpatialSqlGenerator("oracle").drop_spatial_table("roads")) == 2
        assert SpatialSqlGenerator("postgres").drop_spatial_table("roads") == ["DROP TABLE roads"]
