"""
Tests for STQL query construction.

Covers:
- filter_spec_from_params: raw query vs named filters
- build_query: clause order, omission of empty fields, quoting
- neighbor expansion: defaults, validation, rewrite shape
- compose_query: the two "missing filter" errors
"""

import pytest

from core.errors import InvalidArgumentError
from core.models import Direction
from core.stql import (
    FilterSet,
    NeighborSpec,
    RawQuery,
    build_query,
    compose_query,
    filter_spec_from_params,
    neighbor_spec_from_params,
    parse_levels,
    quote,
    with_neighbors,
)


class TestFilterSpec:
    def test_raw_query_wins_over_named_filters(self):
        spec = filter_spec_from_params(
            query='layer = "Containers"', name_pattern="redis*", type="pod"
        )

        assert spec == RawQuery('layer = "Containers"')
        assert build_query(spec) == 'layer = "Containers"'

    def test_empty_raw_query_falls_back_to_filters(self):
        spec = filter_spec_from_params(query="", name_pattern="redis*")

        assert spec == FilterSet(name="redis*")

    def test_none_parameters_become_empty_fields(self):
        spec = filter_spec_from_params(None, None, None, None, None, None)

        assert spec == FilterSet()
        assert build_query(spec) == ""


class TestBuildQuery:
    def test_single_filter(self):
        assert build_query(FilterSet(name="redis*")) == 'name = "redis*"'

    def test_clause_order_is_fixed(self):
        spec = FilterSet(
            healthstate="CRITICAL",
            domain="cluster.example.com",
            layer="Containers",
            type="pod",
            name="checkout*",
        )

        assert build_query(spec) == (
            'name = "checkout*" AND type = "pod" AND layer = "Containers" '
            'AND domain = "cluster.example.com" AND healthstate = "CRITICAL"'
        )

    def test_empty_fields_are_omitted(self):
        spec = FilterSet(type="service", healthstate="DEVIATING")

        assert build_query(spec) == 'type = "service" AND healthstate = "DEVIATING"'

    def test_raw_query_is_verbatim(self):
        raw = 'name = "a" OR name = "b"   '

        assert build_query(RawQuery(raw)) == raw


class TestQuote:
    def test_plain_value(self):
        assert quote("redis") == '"redis"'

    def test_wildcards_pass_through(self):
        assert quote("redis-*") == '"redis-*"'

    def test_embedded_quote_is_escaped(self):
        assert quote('my "special" pod') == '"my \\"special\\" pod"'

    def test_backslash_is_escaped(self):
        assert quote("a\\b") == '"a\\\\b"'

    def test_value_cannot_break_out_of_literal(self):
        query = build_query(FilterSet(name='x" OR name = "*'))

        assert query == 'name = "x\\" OR name = \\"*"'


class TestNeighborSpec:
    def test_defaults(self):
        spec = neighbor_spec_from_params(True)

        assert spec == NeighborSpec(enabled=True, levels="1", direction=Direction.BOTH)

    def test_disabled_ignores_invalid_values(self):
        assert neighbor_spec_from_params(False, "99", "sideways") == NeighborSpec()

    @pytest.mark.parametrize("levels,expected", [("1", "1"), (14, "14"), ("all", "all"), ("ALL", "all"), ("", "1")])
    def test_valid_levels(self, levels, expected):
        assert parse_levels(levels) == expected

    @pytest.mark.parametrize("levels", ["0", "15", "two", -1])
    def test_invalid_levels(self, levels):
        with pytest.raises(InvalidArgumentError, match="with_neighbors_levels"):
            parse_levels(levels)

    def test_invalid_direction_names_the_value(self):
        with pytest.raises(InvalidArgumentError, match="sideways"):
            neighbor_spec_from_params(True, "1", "sideways")


class TestWithNeighbors:
    @pytest.mark.parametrize("direction", ["up", "down", "both"])
    def test_rewrite_keeps_base_set(self, direction):
        base = 'type = "service"'

        assert with_neighbors(base, "3", direction) == (
            f'type = "service" OR withNeighborsOf(components = (type = "service"), '
            f'levels = "3", direction = "{direction}")'
        )

    def test_rewrite_accepts_enum(self):
        assert with_neighbors("name = \"a\"", "all", Direction.UP).endswith(
            'levels = "all", direction = "up")'
        )

    def test_invalid_direction(self):
        with pytest.raises(InvalidArgumentError, match="left"):
            with_neighbors('name = "a"', "1", "left")

    def test_empty_base_is_rejected(self):
        with pytest.raises(InvalidArgumentError, match="requires at least one filter"):
            with_neighbors("", "1", "both")


class TestComposeQuery:
    def test_redis_downstream_example(self):
        spec = filter_spec_from_params(name_pattern="redis*")
        neighbors = neighbor_spec_from_params(True, None, "down")

        assert compose_query(spec, neighbors) == (
            'name = "redis*" OR withNeighborsOf(components = (name = "redis*"), '
            'levels = "1", direction = "down")'
        )

    def test_raw_query_can_be_expanded(self):
        query = compose_query(RawQuery('layer = "Services"'), neighbor_spec_from_params(True))

        assert query.startswith('layer = "Services" OR withNeighborsOf(components = (layer = "Services")')

    def test_no_filter_at_all(self):
        with pytest.raises(InvalidArgumentError, match="no filter provided"):
            compose_query(FilterSet())

    def test_neighbors_without_filter(self):
        with pytest.raises(InvalidArgumentError, match="requires at least one filter"):
            compose_query(FilterSet(), NeighborSpec(enabled=True))

    def test_disabled_neighbors_leave_base_untouched(self):
        assert compose_query(FilterSet(layer="Containers"), NeighborSpec()) == 'layer = "Containers"'
