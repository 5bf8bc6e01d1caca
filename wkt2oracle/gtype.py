"""
Oracle SDO_GTYPE and spatial-index ``layer_gtype`` derivation.
"""

import re
from typing import Optional

from .errors import GrammarError
from .wkt_info import WktInfo


GTYPE_BASE_CODES = {
    "POINT": 1,
    "LINESTRING": 2,
    "POLYGON": 3,
    "GEOMETRYCOLLECTION": 4,
}

# OGC type name (upper case, no Z/M) -> layer_gtype
LAYER_GTYPES = {
    "POINT": "POINT",
    "MULTIPOINT": "MULTIPOINT",
    "LINESTRING": "LINE",
    "MULTILINESTRING": "MULTILINE",
    "CURVE": "CURVE",
    "MULTICURVE": "MULTICURVE",
    "POLYGON": "POLYGON",
    "MULTIPOLYGON": "MULTIPOLYGON",
    "TRIANGLE": "POLYGON",
}

DEFAULT_LAYER_GTYPE = "COLLECTION"


def get_dimensions(info: WktInfo) -> int:
    """Number of ordinates per coordinate tuple."""
    return info.dimensions


def get_sdo_gtype(info: WktInfo) -> str:
    """
    Compute the four-digit SDO_GTYPE of a classified geometry.

    The code is ``DL0T``: D is the dimension count, L the position of the
    measure ordinate (0 when there is none) and T the geometry type, plus 4
    for MULTI variants.

    Args:
        info: Classified geometry literal

    Returns:
        The SDO_GTYPE as a string, e.g. ``'4401'`` for POINT ZM

    Raises:
        GrammarError: If the base geometry type is not recognised
    """
    d = get_dimensions(info)
    # Measure is always the last ordinate
    l = d if info.has_m else 0

    base = info.geometry_base_type.upper()
    if base not in GTYPE_BASE_CODES:
        raise GrammarError(f"Unsupported geometry type: {info.geometry_base_type}")
    t = GTYPE_BASE_CODES[base]
    if info.is_multi and not info.is_collection:
        t += 4
    return f"{d}{l}0{t}"


def get_layer_gtype(geometry_type: Optional[str]) -> Optional[str]:
    """
    Map an OGC geometry type name to an Oracle spatial index ``layer_gtype``.

    Trailing M and Z qualifiers are ignored. Types Oracle has no specific
    layer type for (GeometryCollection, TIN, CompoundCurve, ...) map to
    COLLECTION.

    Args:
        geometry_type: OGC type name such as ``'LineString'`` or ``'Point Z'``

    Returns:
        The layer_gtype, or None when no type was given
    """
    if geometry_type is None or not geometry_type.strip():
        return None
    name = re.sub(r"\s", "", geometry_type).upper()
    if name.endswith("M"):
        name = name[:-1]
    if name.endswith("Z"):
        name = name[:-1]
    return LAYER_GTYPES.get(name, DEFAULT_LAYER_GTYPE)
