"""
EPSG to Oracle SRID resolution.

Oracle keeps its own SRID numbering. ``SDO_CS.MAP_EPSG_SRID_TO_ORACLE``
translates most EPSG codes but returns NULL for some that are registered
directly in ``SDO_COORD_REF_SYSTEM`` (EPSG:25830 for example), so lookups
COALESCE both sources.

Resolved values are memoised in a SridCache that callers inject, so tests
and separate connections never share hidden global state.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, Optional, Union

from .errors import SridResolutionError

logger = logging.getLogger(__name__)


EPSG_TO_ORACLE_FUNCTION = "SDO_CS.MAP_EPSG_SRID_TO_ORACLE"
ORACLE_SR_KIND_PROJECTED = "PROJECTED"

# Executes a query returning one row and one column; None when NULL or no row
QueryExecutor = Callable[[str], Optional[str]]

_MISSING = object()


class SridCache:
    """
    Thread-safe get-or-compute map.

    A single lock guards the whole dictionary. The compute function runs
    outside the lock, so two threads missing the same key may both compute
    it; the last write wins. A compute that raises stores nothing.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._values: Dict[Hashable, Any] = {}

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def get_or_compute(self, key: Hashable, compute: Callable[[Hashable], Any]) -> Any:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        Args:
            key: Cache key
            compute: Called with ``key`` on a miss; exceptions propagate

        Returns:
            The cached or freshly computed value (None is a valid value)
        """
        with self._lock:
            value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            return value

        value = compute(key)
        with self._lock:
            self._values[key] = value
        return value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


def get_oracle_srid_expression(epsg_srid: Union[int, str]) -> str:
    """
    Build the SQL expression that maps an EPSG SRID to Oracle's SRID.

    Args:
        epsg_srid: EPSG code

    Returns:
        A ``COALESCE(...)`` expression usable anywhere a number is expected
    """
    return (
        f"COALESCE( {EPSG_TO_ORACLE_FUNCTION}({epsg_srid}), "
        f"(SELECT srid from SDO_COORD_REF_SYSTEM where srid = {epsg_srid}))"
    )


def _normalize_srid(srid: Union[int, str, None]) -> Optional[str]:
    if srid is None:
        return None
    text = str(srid).strip()
    return text or None


class ExpressionSridResolver:
    """
    Resolver that needs no database: it inlines the lookup expression and
    lets Oracle evaluate it when the statement runs.
    """

    def get_oracle_srid(self, epsg_srid: Union[int, str, None]) -> Optional[str]:
        srid = _normalize_srid(epsg_srid)
        if srid is None:
            return None
        return get_oracle_srid_expression(srid)


class OracleSridResolver:
    """
    Resolver that queries a live Oracle database and caches the answers.

    Args:
        query_executor: Scalar query function (see connection_query_executor)
        srid_cache: Cache for EPSG -> Oracle SRID; a private one if omitted
        kind_cache: Cache for Oracle SRID -> COORD_REF_SYS_KIND
    """

    def __init__(
        self,
        query_executor: QueryExecutor,
        srid_cache: Optional[SridCache] = None,
        kind_cache: Optional[SridCache] = None,
    ):
        self.query_executor = query_executor
        self.srid_cache = srid_cache if srid_cache is not None else SridCache()
        self.kind_cache = kind_cache if kind_cache is not None else SridCache()

    def get_oracle_srid(self, epsg_srid: Union[int, str, None]) -> Optional[str]:
        """
        Resolve an EPSG SRID to the Oracle SRID.

        Args:
            epsg_srid: EPSG code; blank values resolve to None without a query

        Returns:
            The Oracle SRID as text, or None when Oracle knows no match

        Raises:
            SridResolutionError: If the lookup query fails
        """
        srid = _normalize_srid(epsg_srid)
        if srid is None:
            return None
        return self.srid_cache.get_or_compute(srid, self._load_oracle_srid)

    def _load_oracle_srid(self, srid: str) -> Optional[str]:
        sql = f"SELECT {get_oracle_srid_expression(srid)} FROM dual"
        logger.debug("Resolving Oracle SRID for EPSG:%s", srid)
        try:
            result = self.query_executor(sql)
        except Exception as e:
            logger.error("Failed to find the Oracle SRID for EPSG:%s: %s", srid, e)
            raise SridResolutionError(
                f"Failed to find the Oracle SRID for EPSG:{srid}", srid
            ) from e
        return _normalize_srid(result)

    def get_oracle_srid_kind(self, oracle_srid: Union[int, str, None]) -> Optional[str]:
        """Return COORD_REF_SYS_KIND (e.g. PROJECTED, GEOGRAPHIC2D) of an Oracle SRID."""
        srid = _normalize_srid(oracle_srid)
        if srid is None:
            return None
        return self.kind_cache.get_or_compute(srid, self._load_oracle_srid_kind)

    def _load_oracle_srid_kind(self, oracle_srid: str) -> Optional[str]:
        sql = f"Select COORD_REF_SYS_KIND from SDO_COORD_REF_SYSTEM where srid = {oracle_srid}"
        try:
            return self.query_executor(sql)
        except Exception as e:
            logger.error("Failed to identify the kind of Oracle SRID %s: %s", oracle_srid, e)
            raise SridResolutionError(
                f"Failed to identify if the Oracle SRID is projected: {oracle_srid}", oracle_srid
            ) from e

    def is_oracle_srid_projected(self, oracle_srid: Union[int, str, None]) -> bool:
        kind = self.get_oracle_srid_kind(oracle_srid)
        return kind is not None and kind.upper() == ORACLE_SR_KIND_PROJECTED

    def is_srid_projected(self, epsg_srid: Union[int, str, None]) -> bool:
        return self.is_oracle_srid_projected(self.get_oracle_srid(epsg_srid))


def connection_query_executor(connection) -> QueryExecutor:
    """
    Wrap a DB-API 2.0 connection (e.g. ``oracledb``) as a scalar query executor.

    Args:
        connection: An open database connection

    Returns:
        Function running a query and returning the first column of the first
        row as text, or None
    """
    def execute(sql: str) -> Optional[str]:
        cursor = connection.cursor()
        try:
            cursor.execute(sql)
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None or row[0] is None:
            return None
        return str(row[0])

    return execute
