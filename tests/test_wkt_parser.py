"""
Tests for the recursive-descent WKT parser.
"""

import pytest

from wkt2oracle.errors import (
    DimensionMismatchError,
    GrammarError,
    NumericFormatError,
    ParserReuseError,
)
from wkt2oracle.wkt_parser import TokenKind, WktCoordinatesParser, parse_wkt, tokenize


class TestTokenize:

    def test_structural_tokens(self):
        tokens = list(tokenize("POINT (1.5 -2e3)"))
        assert [t.kind for t in tokens] == [
            TokenKind.WORD, TokenKind.L_PAREN, TokenKind.WORD, TokenKind.WORD, TokenKind.R_PAREN,
        ]
        assert [t.text for t in tokens] == ["POINT", "(", "1.5", "-2e3", ")"]
        assert tokens[2].position == 7

    def test_comment_runs_to_end_of_line(self):
        tokens = list(tokenize("POINT(1 # first ordinate\n 2)"))
        assert [t.text for t in tokens] == ["POINT", "(", "1", "2", ")"]

    def test_unknown_character_is_its_own_token(self):
        tokens = list(tokenize("1;2"))
        assert [t.kind for t in tokens] == [TokenKind.WORD, TokenKind.OTHER, TokenKind.WORD]


class TestParseValidGeometries:

    def test_point(self):
        parsed = parse_wkt("Point(10 10)")
        assert parsed.elem_info == (1, 1, 1)
        assert parsed.ordinates == ("10", "10")
        assert parsed.dimensions == 2
        assert parsed.geometry_type == "POINT"

    def test_multipoint(self):
        parsed = parse_wkt("MultiPoint(10.0 10, 20 20, 30 30)")
        assert parsed.elem_info == (1, 1, 1, 3, 1, 1, 5, 1, 1)
        assert parsed.ordinates == ("10.0", "10", "20", "20", "30", "30")

    def test_multipoint_with_wrapped_points(self):
        parsed = parse_wkt("MULTIPOINT((1 2), (3 4))")
        assert parsed.elem_info == (1, 1, 1, 3, 1, 1)
        assert parsed.ordinates == ("1", "2", "3", "4")

    def test_linestring(self):
        parsed = parse_wkt("LineSTring(10 10,20 20,30 30)")
        assert parsed.elem_info == (1, 2, 1)
        assert len(parsed.ordinates) == 6

    def test_multilinestring(self):
        parsed = parse_wkt("MULTILINESTRING((1 1,2 2),(3 3,4 4,5 5))")
        assert parsed.elem_info == (1, 2, 1, 5, 2, 1)

    def test_polygon_with_hole(self):
        parsed = parse_wkt("POLYGON((10 10,20 20,30 30,10 10),(1 1,2 2,1 1))")
        assert parsed.elem_info == (1, 1003, 1, 9, 2003, 1)
        assert parsed.triplets() == [(1, 1003, 1), (9, 2003, 1)]

    def test_polygon_with_two_holes(self):
        parsed = parse_wkt("POLYGON((0 0,10 0,10 10,0 0),(1 1,2 2,1 1),(3 3,4 4,3 3))")
        assert parsed.elem_info == (1, 1003, 1, 9, 2003, 1, 15, 2003, 1)

    def test_multipolygon(self):
        parsed = parse_wkt("MULTIPOLYGON(((10 10,20 20,10 10)),((30 30,40 40,30 30)))")
        assert parsed.elem_info == (1, 1003, 1, 7, 1003, 1)

    def test_geometry_collection(self):
        parsed = parse_wkt(
            "GEOMETRYCOLLECTION(POLYGON((10 10,20 20,10 10)),"
            "POLYGON((30 30,40 40,30 30)),POINT(1 1))"
        )
        assert parsed.elem_info == (1, 1003, 1, 7, 1003, 1, 13, 1, 1)
        assert parsed.geometry_type == "GEOMETRYCOLLECTION"

    @pytest.mark.parametrize("wkt,dimensions", [
        ("POINT Z(1 2 3)", 3),
        ("POINTZ(1 2 3)", 3),
        ("POINT M (1 2 3)", 3),
        ("POINTZM(1 2 3 4)", 4),
        ("POINT ZM(1 2 3 4)", 4),
        ("LINESTRING M(1 1 1, 2 2 2)", 3),
    ])
    def test_qualified_dimensions(self, wkt, dimensions):
        parsed = parse_wkt(wkt)
        assert parsed.dimensions == dimensions
        assert len(parsed.ordinates) % dimensions == 0

    def test_nested_collection_checks_immediate_parent(self):
        parsed = parse_wkt("GEOMETRYCOLLECTION Z(GEOMETRYCOLLECTION Z(POINT Z(1 1 1)), POINT Z(2 2 2))")
        assert parsed.elem_info == (1, 1, 1, 4, 1, 1)
        assert parsed.ordinates == ("1", "1", "1", "2", "2", "2")
        assert parsed.dimensions == 3

    def test_collection_members_share_dimensions(self):
        parsed = parse_wkt("GEOMETRYCOLLECTION Z(POINT Z(1 1 1), LINESTRING Z(1 1 1, 2 2 2))")
        assert parsed.elem_info == (1, 1, 1, 4, 2, 1)
        assert parsed.dimensions == 3

    def test_ordinates_keep_their_text(self):
        parsed = parse_wkt("POINT(1e3 -0.000001)")
        assert parsed.ordinates == ("1e3", "-0.000001")

    def test_offsets_point_past_previous_ordinates(self):
        parsed = parse_wkt("MULTILINESTRING((1 1,2 2,3 3),(4 4,5 5))")
        offsets = [t[0] for t in parsed.triplets()]
        assert offsets == [1, 7]
        assert offsets[-1] <= len(parsed.ordinates)


class TestParseErrors:

    @pytest.mark.parametrize("wkt", [
        "",
        "(1 1)",
        "POINT",
        "POINT(1)",
        "POINT(1 2 3)",
        "POINT(1 2",
        "POINT EMPTY",
        "POINT Z EMPTY",
        "POINT Q(1 1)",
        "CIRCLE(1 1)",
        "POINT(1 2) POINT(3 4)",
        "LINESTRING(1 1; 2 2)",
        "POLYGON(1 1, 2 2)",
        "POINT(1 NaN)",
        "POINT()",
        "POINTZM(1 1)",
        "GeometryCollection()",
    ])
    def test_malformed_wkt(self, wkt):
        with pytest.raises(GrammarError):
            parse_wkt(wkt)

    def test_empty_geometry_message(self):
        with pytest.raises(GrammarError, match="Empty geometries not supported"):
            parse_wkt("LINESTRING EMPTY")

    def test_error_reports_position(self):
        with pytest.raises(GrammarError) as exc_info:
            parse_wkt("POINT(1 2 3)")
        assert exc_info.value.position == 10

    @pytest.mark.parametrize("wkt", [
        "GEOMETRYCOLLECTION(POINT(1 1), POINT Z(1 1 1))",
        "GEOMETRYCOLLECTION Z(POINT(1 1))",
        "GEOMETRYCOLLECTION M(POINT ZM(1 1 1 1))",
        "GEOMETRYCOLLECTION(GEOMETRYCOLLECTION Z(POINT Z(1 1 1)))",
    ])
    def test_mixed_dimensions(self, wkt):
        with pytest.raises(DimensionMismatchError):
            parse_wkt(wkt)

    @pytest.mark.parametrize("wkt", [
        "POINT(abc 1)",
        "POINT(inf 1)",
        "POINT(1 1.2.3)",
        "POINT(1\xa0 2)",
        "POINT(1 2\xb2)",
        "POINT(0x1A 2)",
    ])
    def test_bad_numbers(self, wkt):
        with pytest.raises(NumericFormatError):
            parse_wkt(wkt)


class TestParserReuse:

    def test_second_parse_is_rejected(self):
        parser = WktCoordinatesParser("POINT(1 1)")
        parser.parse()
        with pytest.raises(ParserReuseError):
            parser.parse()

    def test_failed_parse_also_consumes_instance(self):
        parser = WktCoordinatesParser("POINT(1)")
        with pytest.raises(GrammarError):
            parser.parse()
        with pytest.raises(ParserReuseError):
            parser.parse()


class TestParseProperties:

    @pytest.mark.parametrize("wkt", [
        "POINT ZM(1 2 3 4)",
        "MULTIPOLYGON(((0 0,1 1,0 0)),((5 5,6 6,5 5),(5.5 5.5,5.6 5.6,5.5 5.5)))",
        "GEOMETRYCOLLECTION(POINT(1 1),LINESTRING(1 1,2 2),POLYGON((0 0,1 1,0 0)))",
    ])
    def test_repeated_parses_are_identical(self, wkt):
        first = parse_wkt(wkt)
        second = parse_wkt(wkt)
        assert first == second
        assert len(first.elem_info) % 3 == 0
        assert len(first.ordinates) % first.dimensions == 0


class TestQuotes:

    @pytest.mark.parametrize("wkt", [
        "POINT(1 2 # it's\n)",
        "POINT(1 2 # x') ; DROP TABLE t; --\n)",
        "POINT('1' 2)",
    ])
    def test_quotes_are_rejected_even_in_comments(self, wkt):
        with pytest.raises(GrammarError, match="single quotes") as exc_info:
            parse_wkt(wkt)
        assert exc_info.value.position == wkt.index("'")

    def test_comment_without_quotes_is_fine(self):
        assert parse_wkt("POINT(1 2 # ordinates\n)").ordinates == ("1", "2")
