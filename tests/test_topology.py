"""
Tests for topology component simplification and the getComponents flow.
"""

import json

import pytest

from core.errors import BackendError, InvalidArgumentError
from core.models import Entity, split_tag
from core.stql import FilterSet, RawQuery, neighbor_spec_from_params
from core.topology import (
    get_components,
    query_topology,
    render_components,
    simplify_component,
    simplify_components,
)

REDIS = {
    "id": 42,
    "name": "redis-master",
    "type": 7,
    "typeName": "pod",
    "identifiers": ["urn:kubernetes:/prod:default:pod/redis-master"],
    "tags": ["app:redis", "url:http://redis:6379"],
    "outgoingRelations": [{"id": 900}, {"id": 901}],
    "state": {"healthState": "CLEAR"},
    "synced": [{"sourceId": 1}],
}


class TestSimplifyComponent:
    def test_keeps_only_entity_fields(self):
        entity = simplify_component(REDIS)

        assert entity == Entity(
            id=42,
            name="redis-master",
            type="pod",
            identifiers=("urn:kubernetes:/prod:default:pod/redis-master",),
            tags=("app:redis", "url:http://redis:6379"),
            outgoing_relations=(900, 901),
        )

    def test_type_as_object(self):
        entity = simplify_component({"id": 1, "name": "svc", "type": {"name": "service"}})

        assert entity.type == "service"

    def test_legacy_labels(self):
        entity = simplify_component({"id": 1, "name": "svc", "labels": [{"name": "team:core"}]})

        assert entity.tags == ("team:core",)

    def test_missing_optional_fields(self):
        entity = simplify_component({"id": 5, "name": "bare"})

        assert entity.identifiers == ()
        assert entity.tags == ()
        assert entity.outgoing_relations == ()
        assert entity.type == ""

    def test_order_is_preserved(self):
        raws = [{"id": i, "name": f"c{i}"} for i in (3, 1, 2)]

        assert [e.id for e in simplify_components(raws)] == [3, 1, 2]

    def test_entities_are_immutable(self):
        entity = simplify_component(REDIS)

        with pytest.raises(AttributeError):
            entity.name = "other"


class TestTags:
    def test_split_at_first_colon(self):
        assert split_tag("url:http://redis:6379") == ("url", "http://redis:6379")

    def test_tag_without_colon(self):
        assert split_tag("standalone") == ("standalone", "")

    def test_tag_value_lookup(self):
        entity = simplify_component(REDIS)

        assert entity.tag_value("url") == "http://redis:6379"
        assert entity.tag_value("missing") is None


class TestRenderComponents:
    def test_empty_result_message(self):
        assert render_components('name = "nope"', []) == 'no components found for query: name = "nope"'

    def test_table(self):
        output = render_components('name = "redis*"', [simplify_component(REDIS)])

        assert output.startswith('Found 1 component(s) for query: name = "redis*"\n\n')
        assert "| ID | Name | Type | Identifiers |" in output
        assert "| 42 | redis-master | pod | urn:kubernetes:/prod:default:pod/redis-master |" in output

    def test_identifiers_are_capped_at_two(self):
        entity = Entity(id=1, name="n", type="pod", identifiers=("a", "b", "c", "d"))

        output = render_components("q", [entity])

        assert "| 1 | n | pod | a, b, ... and 2 more |" in output

    def test_no_identifiers(self):
        output = render_components("q", [Entity(id=1, name="n", type="")])

        assert "| 1 | n | - | - |" in output

    def test_pipe_in_name_is_escaped(self):
        output = render_components("q", [Entity(id=1, name="a|b", type="pod")])

        assert "a\\|b" in output


class TestGetComponents:
    def test_builds_query_and_renders(self, backend):
        backend.components = [REDIS]

        output = get_components(
            backend, FilterSet(name="redis*"), neighbor_spec_from_params(True, None, "down")
        )

        expected_query = (
            'name = "redis*" OR withNeighborsOf(components = (name = "redis*"), '
            'levels = "1", direction = "down")'
        )
        assert backend.calls == [("topology", expected_query, None)]
        assert "redis-master" in output

    def test_zero_matches_is_not_an_error(self, backend):
        output = get_components(backend, RawQuery('layer = "Nothing"'))

        assert output == 'no components found for query: layer = "Nothing"'

    def test_no_filter_skips_backend(self, backend):
        with pytest.raises(InvalidArgumentError):
            get_components(backend, FilterSet())

        assert backend.calls == []

    def test_backend_failure_propagates(self, backend):
        backend.fail_all = "HTTP 500"

        with pytest.raises(BackendError, match="HTTP 500"):
            get_components(backend, FilterSet(type="pod"))


class TestQueryTopology:
    def test_returns_json(self, backend, now):
        backend.components = [REDIS]

        output = json.loads(query_topology(backend, 'type = "pod"', now))

        assert output[0]["id"] == 42
        assert output[0]["identifiers"] == ["urn:kubernetes:/prod:default:pod/redis-master"]
        assert backend.calls == [("topology", 'type = "pod"', now)]

    def test_requires_query(self, backend):
        with pytest.raises(InvalidArgumentError):
            query_topology(backend, "")
