import pytest

from wkt2oracle.gtype import get_layer_gtype, get_sdo_gtype
from wkt2oracle.wkt_info import get_wkt_info


class TestSdoGtype:

    @pytest.mark.parametrize("wkt,gtype", [
        ("POINT(1 1)", "2001"),
        ("POINT Z(1 1 1)", "3001"),
        ("POINT M(1 1 1)", "3301"),
        ("POINT ZM(1 1 1 1)", "4401"),
        ("PointZ(10 10 3)", "3001"),
        ("PointM(10 10 3)", "3301"),
        ("Point ZM(10 10 3 1)", "4401"),
        ("LINESTRING(1 1, 2 2)", "2002"),
        ("LINESTRING Z(1 1 1, 2 2 2)", "3002"),
        ("POLYGON((0 0, 1 1, 0 0))", "2003"),
        ("MULTIPOINT Z(1 1 1)", "3005"),
        ("MULTILINESTRING M((1 1 1, 2 2 2))", "3306"),
        ("MultiLineString((1 1, 2 2),(3 3, 4 4))", "2006"),
        ("MULTIPOLYGON(((0 0, 1 1, 0 0)))", "2007"),
        ("GEOMETRYCOLLECTION(POINT(1 1))", "2004"),
        ("GEOMETRYCOLLECTION ZM(POINT ZM(1 1 1 1))", "4404"),
    ])
    def test_gtype(self, wkt, gtype):
        assert get_sdo_gtype(get_wkt_info(wkt)) == gtype

    def test_srid_prefix_does_not_change_gtype(self):
        assert get_sdo_gtype(get_wkt_info("SRID=4326;POINT(1 1)")) == "2001"


class TestLayerGtype:

    @pytest.mark.parametrize("geometry_type,layer_gtype", [
        ("Point", "POINT"),
        ("MultiPoint", "MULTIPOINT"),
        ("LineString", "LINE"),
        ("LINESTRING Z", "LINE"),
        ("MultiLineString ZM", "MULTILINE"),
        ("Polygon M", "POLYGON"),
        ("MultiPolygon", "MULTIPOLYGON"),
        ("Triangle", "POLYGON"),
        ("Curve", "CURVE"),
        ("MultiCurve", "MULTICURVE"),
        ("GeometryCollection", "COLLECTION"),
        ("TIN", "COLLECTION"),
        ("CompoundCurve", "COLLECTION"),
    ])
    def test_layer_gtype(self, geometry_type, layer_gtype):
        assert get_layer_gtype(geometry_type) == layer_gtype

    @pytest.mark.parametrize("geometry_type", [None, "", "  "])
    def test_blank_type_has_no_layer_gtype(self, geometry_type):
        assert get_layer_gtype(geometry_type) is None
