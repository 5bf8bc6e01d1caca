"""
Tests for the SRID cache and the EPSG -> Oracle SRID resolvers.
"""

import threading

import pytest

from wkt2oracle.errors import SridResolutionError
from wkt2oracle.srid_cache import (
    ExpressionSridResolver,
    OracleSridResolver,
    SridCache,
    connection_query_executor,
    get_oracle_srid_expression,
)


class TestSridCache:

    def test_computes_once(self):
        cache = SridCache()
        calls = []

        def compute(key):
            calls.append(key)
            return key * 2

        assert cache.get_or_compute(21, compute) == 42
        assert cache.get_or_compute(21, compute) == 42
        assert calls == [21]
        assert 21 in cache
        assert len(cache) == 1

    def test_none_is_cached(self):
        cache = SridCache()
        calls = []

        def compute(key):
            calls.append(key)
            return None

        assert cache.get_or_compute("x", compute) is None
        assert cache.get_or_compute("x", compute) is None
        assert calls == ["x"]

    def test_failed_compute_is_not_cached(self):
        cache = SridCache()

        def failing(key):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("x", failing)
        assert "x" not in cache
        assert cache.get_or_compute("x", lambda key: "ok") == "ok"

    def test_put_get_clear(self):
        cache = SridCache()
        cache.put("a", 1)
        assert cache.get("a") == 1
        assert cache.get("b", "default") == "default"
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_access(self):
        cache = SridCache()
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            for i in range(100):
                results.append(cache.get_or_compute(i % 10, lambda key: key + 1))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 800
        assert len(cache) == 10
        assert all(cache.get(k) == k + 1 for k in range(10))


class TestOracleSridExpression:

    def test_expression(self):
        assert get_oracle_srid_expression(4326) == (
            "COALESCE( SDO_CS.MAP_EPSG_SRID_TO_ORACLE(4326), "
            "(SELECT srid from SDO_COORD_REF_SYSTEM where srid = 4326))"
        )

    def test_expression_resolver(self):
        resolver = ExpressionSridResolver()
        assert resolver.get_oracle_srid(" 25830 ") == get_oracle_srid_expression("25830")
        assert resolver.get_oracle_srid(None) is None
        assert resolver.get_oracle_srid("  ") is None


class TestOracleSridResolver:

    def test_resolves_with_query(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        assert resolver.get_oracle_srid(4326) == "8307"
        assert fake_executor.queries == [
            "SELECT COALESCE( SDO_CS.MAP_EPSG_SRID_TO_ORACLE(4326), "
            "(SELECT srid from SDO_COORD_REF_SYSTEM where srid = 4326)) FROM dual"
        ]

    def test_lookups_are_cached(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        resolver.get_oracle_srid(4326)
        resolver.get_oracle_srid("4326")
        assert len(fake_executor.queries) == 1

    def test_unknown_srid_resolves_to_none_and_is_cached(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        assert resolver.get_oracle_srid(999999) is None
        assert resolver.get_oracle_srid(999999) is None
        assert len(fake_executor.queries) == 1

    def test_blank_srid_skips_query(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        assert resolver.get_oracle_srid("") is None
        assert resolver.get_oracle_srid(None) is None
        assert fake_executor.queries == []

    def test_shared_cache(self, fake_executor):
        cache = SridCache()
        OracleSridResolver(fake_executor, srid_cache=cache).get_oracle_srid(4326)
        OracleSridResolver(fake_executor, srid_cache=cache).get_oracle_srid(4326)
        assert len(fake_executor.queries) == 1
        assert cache.get("4326") == "8307"

    def test_query_failure_raises_and_is_not_cached(self, make_executor):
        executor = make_executor(error=RuntimeError("ORA-12541: TNS:no listener"))
        resolver = OracleSridResolver(executor)
        with pytest.raises(SridResolutionError) as exc_info:
            resolver.get_oracle_srid(4326)
        assert exc_info.value.srid == "4326"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

        executor.error = None
        executor.answers = {"MAP_EPSG_SRID_TO_ORACLE(4326)": "8307"}
        assert resolver.get_oracle_srid(4326) == "8307"

    def test_srid_kind(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        assert resolver.get_oracle_srid_kind(8307) == "GEOGRAPHIC2D"
        assert not resolver.is_oracle_srid_projected(8307)
        assert resolver.is_oracle_srid_projected(25830)
        assert "Select COORD_REF_SYS_KIND from SDO_COORD_REF_SYSTEM where srid = 8307" in fake_executor.queries

    def test_is_srid_projected_maps_epsg_first(self, fake_executor):
        resolver = OracleSridResolver(fake_executor)
        assert not resolver.is_srid_projected(4326)
        assert resolver.is_srid_projected(25830)
        assert not resolver.is_srid_projected(None)

    def test_kind_query_failure(self, make_executor):
        resolver = OracleSridResolver(make_executor(error=RuntimeError("down")))
        with pytest.raises(SridResolutionError):
            resolver.get_oracle_srid_kind(8307)


class TestConnectionQueryExecutor:

    def test_returns_first_column_as_text(self, fake_connection):
        connection = fake_connection((8307,))
        execute = connection_query_executor(connection)
        assert execute("SELECT 1 FROM dual") == "8307"
        assert connection.cursor_obj.executed == ["SELECT 1 FROM dual"]
        assert connection.cursor_obj.closed

    @pytest.mark.parametrize("row", [None, (None,)])
    def test_null_results(self, fake_connection, row):
        execute = connection_query_executor(fake_connection(row))
        assert execute("SELECT NULL FROM dual") is None
