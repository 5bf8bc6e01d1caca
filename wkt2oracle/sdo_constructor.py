"""
SDO_GEOMETRY constructor generation.

Turns a classified WKT literal into Oracle SQL, either by wrapping plain 2D
WKT in ``SDO_GEOMETRY('<wkt>')`` or by compiling it into the native
constructor:

    SDO_GEOMETRY(<gtype>,<srid>,NULL,SDO_ELEM_INFO_ARRAY(...),SDO_ORDINATE_ARRAY(...))

Two Oracle limits shape the output:

- array constructors accept a bounded number of arguments (ORA-00939), so
  large arrays are shipped as an XML string and rebuilt server side with
  ``xmlsequence``
- string literals are capped at 4000 characters, so long literals are
  concatenated from ``TO_CLOB`` chunks
"""

import logging
from typing import Optional, Sequence, Union

from .gtype import get_sdo_gtype
from .wkt_info import WktInfo, get_wkt_info
from .wkt_parser import ensure_no_quotes, parse_wkt

logger = logging.getLogger(__name__)


DEFAULT_ARRAY_LIMIT = 900
DEFAULT_CLOB_LIMIT = 4000

SDO_GEOMETRY_FUNCTION = "SDO_GEOMETRY"
SDO_ELEM_INFO_ARRAY = "SDO_ELEM_INFO_ARRAY"
SDO_ORDINATE_ARRAY = "SDO_ORDINATE_ARRAY"

XML_ARRAY_PREFIX = (
    "(select cast(multiset(select to_number(x.column_value.extract('v/text()'))c "
    "from table(xmlsequence(xmltype('<r>"
)
XML_ARRAY_SUFFIX = "</r>').extract('r/v')))x)as {array_type})from dual)"


def split_string_into_clobs(source: str, inside_string: bool = False,
                            limit: int = DEFAULT_CLOB_LIMIT) -> str:
    """
    Break a long string literal into a ``TO_CLOB`` concatenation chain.

    Chunks start at multiples of ``limit``. The first chunk is a plain
    literal and every following chunk is appended as ``|| TO_CLOB('...')``.

    Args:
        source: Literal text, without quotes
        inside_string: True when the result is spliced into an already open
            quoted literal; the chain is then wrapped in ``' || ... || '``
        limit: Maximum characters per literal

    Returns:
        A SQL fragment. Short strings come back unchanged when inside a
        string, or quoted otherwise.

    Example:
        >>> split_string_into_clobs("abcdef", limit=4)
        "'abcd' || TO_CLOB('ef')"
    """
    if limit is None:
        limit = DEFAULT_CLOB_LIMIT
    if limit <= 0:
        raise ValueError(f"CLOB limit must be positive, got {limit}")

    if len(source) <= limit:
        return source if inside_string else f"'{source}'"

    chunks = [source[i:i + limit] for i in range(0, len(source), limit)]
    chain = f"'{chunks[0]}'" + "".join(f" || TO_CLOB('{chunk}')" for chunk in chunks[1:])
    if inside_string:
        return f"' || {chain} || '"
    return chain


def get_oracle_wkt(wkt: str, limit: int = DEFAULT_CLOB_LIMIT) -> str:
    """WKT text ready to sit between the quotes of ``SDO_GEOMETRY('...')``."""
    return split_string_into_clobs(wkt, inside_string=True, limit=limit)


def to_sdo_array(values: Sequence[Union[int, str]], array_type: str,
                 array_limit: int = DEFAULT_ARRAY_LIMIT,
                 clob_limit: int = DEFAULT_CLOB_LIMIT) -> str:
    """
    Render an element info or ordinate array.

    Arrays with fewer than ``array_limit`` items use the plain constructor;
    anything bigger is built from an XML document instead.

    Args:
        values: Array items, rendered with ``str()``
        array_type: ``SDO_ELEM_INFO_ARRAY`` or ``SDO_ORDINATE_ARRAY``
        array_limit: Item count from which the XML form is used
        clob_limit: Literal length limit for the XML payload

    Returns:
        The array expression
    """
    if array_limit is None:
        array_limit = DEFAULT_ARRAY_LIMIT
    items = [str(v) for v in values]

    if len(items) < array_limit:
        return f"{array_type}({','.join(items)})"

    logger.debug("Using XML array construction for %s with %d items", array_type, len(items))
    payload = "".join(f"<v>{item}</v>" for item in items)
    return (
        XML_ARRAY_PREFIX
        + split_string_into_clobs(payload, inside_string=True, limit=clob_limit)
        + XML_ARRAY_SUFFIX.format(array_type=array_type)
    )


class OracleGeometryConverter:
    """
    Builds Oracle geometry SQL from WKT/EWKT literals.

    Args:
        srid_resolver: Object with ``get_oracle_srid(epsg)``; when None every
            SRID is emitted as NULL
        array_limit: Item count from which arrays switch to the XML form
        clob_limit: Maximum length of a single string literal
    """

    def __init__(self, srid_resolver=None, array_limit: int = DEFAULT_ARRAY_LIMIT,
                 clob_limit: int = DEFAULT_CLOB_LIMIT):
        self.srid_resolver = srid_resolver
        self.array_limit = array_limit
        self.clob_limit = clob_limit

    def resolve_srid(self, srid: Union[int, str, None]) -> str:
        """Return the Oracle SRID SQL for an EPSG code, or ``NULL``."""
        if srid is None or str(srid).strip() == "":
            return "NULL"
        if self.srid_resolver is None:
            logger.warning("No SRID resolver configured, emitting NULL for SRID %s", srid)
            return "NULL"
        oracle_srid = self.srid_resolver.get_oracle_srid(srid)
        return oracle_srid if oracle_srid else "NULL"

    def to_native_constructor(self, info: WktInfo, srid: Union[int, str, None] = None) -> str:
        """
        Compile a classified literal into a native SDO_GEOMETRY constructor.

        Args:
            info: Classified WKT literal
            srid: EPSG SRID overriding the literal's own ``SRID=`` prefix

        Returns:
            ``SDO_GEOMETRY(gtype,srid,NULL,elem_info,ordinates)``
        """
        gtype = get_sdo_gtype(info)
        oracle_srid = self.resolve_srid(srid if srid is not None else info.srid)
        parsed = parse_wkt(info.wkt_without_srid)

        elem_info = to_sdo_array(parsed.elem_info, SDO_ELEM_INFO_ARRAY,
                                 self.array_limit, self.clob_limit)
        ordinates = to_sdo_array(parsed.ordinates, SDO_ORDINATE_ARRAY,
                                 self.array_limit, self.clob_limit)
        return f"{SDO_GEOMETRY_FUNCTION}({gtype},{oracle_srid},NULL,{elem_info},{ordinates})"

    def to_function(self, wkt: str, srid: Union[int, str, None] = None) -> str:
        """
        Wrap WKT text in ``SDO_GEOMETRY('<wkt>'[, srid])``.

        Raises:
            ValueError: If the WKT is empty
            GrammarError: If the WKT holds a single quote
        """
        if not wkt:
            raise ValueError("The Well-Known Text cannot be null or empty")
        ensure_no_quotes(wkt)
        function = f"{SDO_GEOMETRY_FUNCTION}('{get_oracle_wkt(wkt, self.clob_limit)}'"
        if srid is not None and str(srid).strip():
            function += f", {self.resolve_srid(srid)}"
        return function + ")"

    def convert(self, value: str, srid: Union[int, str, None] = None) -> str:
        """
        Convert a WKT/EWKT literal to Oracle geometry SQL.

        Plain 2D WKT without any SRID uses the short ``SDO_GEOMETRY('<wkt>')``
        form; everything else is compiled into the native constructor.

        Args:
            value: WKT or EWKT literal
            srid: Optional EPSG SRID applied to the geometry

        Returns:
            Complete SQL expression

        Raises:
            GrammarError: If the literal is not valid WKT
            SridResolutionError: If the SRID lookup fails
        """
        info = get_wkt_info(value)
        # A blank SRID counts as no SRID
        if srid is not None and not str(srid).strip():
            srid = None
        if info.is_legacy_compatible and srid is None:
            # Oracle would only reject a bad body at execution time
            parse_wkt(info.wkt_without_srid)
            logger.debug("Converting %s with the WKT function form", info.geometry_type)
            return self.to_function(info.wkt_without_srid)
        logger.debug("Converting %s with the native constructor", info.geometry_type)
        return self.to_native_constructor(info, srid)
