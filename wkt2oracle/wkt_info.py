"""
WKT/EWKT classifier.

Splits a geometry literal into its optional ``SRID=n;`` prefix, the geometry
type keyword (with any ``Z``/``M``/``ZM`` qualifier) and the raw coordinate
body. The body is kept as opaque text here; ``wkt_parser`` does the real work.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .errors import GrammarError


# ("SRID=" INT ";")? KEYWORD (" ")? ("Z"|"M"|"ZM")? "(" DATA ")"
EWKT_PATTERN = re.compile(
    r"(?:SRID\s*=\s*(?P<srid>[0-9]+)\s*;\s*)?"
    r"(?P<wkt>"
    r"(?P<type>"
    r"(?:(?P<multi>MULTI)?(?P<base>POINT|LINESTRING|POLYGON)|(?P<collection>GEOMETRYCOLLECTION))"
    r"\s?(?P<z>Z)?(?P<m>M)?"
    r")"
    r"\s*\((?P<data>.*)\))",
    re.IGNORECASE | re.DOTALL,
)

COLLECTION_TYPE = "GEOMETRYCOLLECTION"


@dataclass(frozen=True)
class WktInfo:
    """Classified view of a WKT/EWKT literal."""
    original_wkt: str
    wkt_without_srid: str
    srid: Optional[int]
    geometry_type: str  # e.g. POINTZM, MULTILINESTRING, GEOMETRYCOLLECTIONZ
    geometry_base_type: str  # POINT, LINESTRING, POLYGON or GEOMETRYCOLLECTION
    has_z: bool
    has_m: bool
    is_multi: bool
    is_collection: bool
    data: str

    @property
    def is_legacy_compatible(self) -> bool:
        """True when the literal is plain 2D WKT without an SRID prefix."""
        return self.srid is None and not self.has_z and not self.has_m

    @property
    def dimensions(self) -> int:
        return 2 + int(self.has_z) + int(self.has_m)


def match_ewkt(value: str) -> Optional[WktInfo]:
    """
    Classify a value if it looks like a WKT/EWKT geometry literal.

    Args:
        value: Candidate text (leading/trailing whitespace is ignored)

    Returns:
        WktInfo for a matching literal, None otherwise
    """
    if value is None:
        return None
    text = value.strip()
    match = EWKT_PATTERN.fullmatch(text)
    if match is None:
        return None

    has_z = match.group("z") is not None
    has_m = match.group("m") is not None
    is_collection = match.group("collection") is not None

    if is_collection:
        base_type = COLLECTION_TYPE
        geometry_type = COLLECTION_TYPE + ("Z" if has_z else "") + ("M" if has_m else "")
    else:
        base_type = match.group("base").upper()
        geometry_type = re.sub(r"\s", "", match.group("type")).upper()

    srid = match.group("srid")
    return WktInfo(
        original_wkt=text,
        wkt_without_srid=match.group("wkt"),
        srid=int(srid) if srid is not None else None,
        geometry_type=geometry_type,
        geometry_base_type=base_type,
        has_z=has_z,
        has_m=has_m,
        is_multi=match.group("multi") is not None,
        is_collection=is_collection,
        data=match.group("data"),
    )


def get_wkt_info(wkt: str) -> WktInfo:
    """
    Classify a WKT/EWKT literal.

    Args:
        wkt: The geometry literal, optionally prefixed with ``SRID=n;``

    Returns:
        The classified WktInfo

    Raises:
        GrammarError: If the text is empty or is not a supported geometry literal
    """
    if wkt is None or not wkt.strip():
        raise GrammarError("The Well-Known Text cannot be null or empty")
    info = match_ewkt(wkt)
    if info is None:
        raise GrammarError(f"Invalid or unsupported WKT: {wkt.strip()!r}")
    return info


def has_z_geometry_type(geometry_type: Optional[str]) -> bool:
    """Check whether an OGC type name such as ``'Linestring Zm'`` carries Z."""
    if geometry_type is None:
        return False
    name = re.sub(r"\s", "", geometry_type).upper()
    return name.endswith("Z") or name.endswith("ZM")


def has_m_geometry_type(geometry_type: Optional[str]) -> bool:
    """Check whether an OGC type name such as ``'LinestringM'`` carries M."""
    if geometry_type is None:
        return False
    return re.sub(r"\s", "", geometry_type).upper().endswith("M")
