"""
Tests for the outline fallback chain and GeoJSON conversion
"""

from opendatamap.boundary.outline import OutlineResolver, overpass_to_geojson, outline_geometry_types
from conftest import FakeOverpassClient, geom, way_member

CLOSED_A = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))
CLOSED_B = ((5.0, 5.0), (6.0, 5.0), (6.0, 6.0), (5.0, 5.0))


def relation(rel_id, *members):
    return {"elements": [{"type": "relation", "id": rel_id, "members": list(members)}]}


def test_single_closed_ring_is_polygon():
    geojson, kind = overpass_to_geojson(relation(1, way_member(1, "outer", *CLOSED_A)))
    assert kind == "relation-polygon"
    feature = geojson.features[0]
    assert feature.geometry.type == "Polygon"
    assert feature.properties["kind"] == "relation-boundary"
    assert feature.properties["id"] == 1


def test_several_closed_rings_are_multipolygon():
    geojson, kind = overpass_to_geojson(relation(
        1, way_member(1, "outer", *CLOSED_A), way_member(2, "outer", *CLOSED_B)
    ))
    assert kind == "relation-polygon"
    geometry = geojson.features[0].geometry
    assert geometry.type == "MultiPolygon"
    assert len(geometry.coordinates) == 2
    assert geometry.coordinates[1][0][0] == [5.0, 5.0]


def test_open_relation_ways_are_multilinestring():
    geojson, kind = overpass_to_geojson(relation(
        1,
        way_member(1, "outer", (0.0, 0.0), (1.0, 0.0)),
        way_member(2, "outer", (1.0, 0.0), (1.0, 1.0)),
    ))
    assert kind == "relation-lines"
    assert geojson.features[0].geometry.type == "MultiLineString"
    assert len(geojson.features[0].geometry.coordinates) == 2


def test_inner_closed_ring_alone_is_not_a_polygon():
    geojson, kind = overpass_to_geojson(relation(1, way_member(1, "inner", *CLOSED_A)))
    assert kind == "relation-lines"


def test_bare_way_is_linestring_and_many_are_multilinestring():
    one = {"elements": [{"type": "way", "id": 1, "geometry": geom((0, 0), (1, 1))}]}
    geojson, kind = overpass_to_geojson(one)
    assert kind == "way-lines"
    assert geojson.features[0].geometry.type == "LineString"

    two = {"elements": [
        {"type": "way", "id": 1, "geometry": geom((0, 0), (1, 1))},
        {"type": "way", "id": 2, "geometry": geom((2, 2), (3, 3))},
    ]}
    geojson, _ = overpass_to_geojson(two)
    assert geojson.features[0].geometry.type == "MultiLineString"


def test_nothing_drawable():
    assert overpass_to_geojson({"elements": []}) == (None, None)
    assert overpass_to_geojson({"elements": [{"type": "node", "id": 1, "lat": 0, "lon": 0}]}) == (None, None)


def test_fallback_to_generic_relation_with_open_ways(config):
    client = FakeOverpassClient(
        {"elements": []},
        relation(9, way_member(1, "outer", (0.0, 0.0), (1.0, 0.0)), way_member(2, "outer", (1.0, 0.0), (1.0, 1.0))),
    )
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q1858")

    assert result.source == "generic-relation"
    assert result.kind == "relation-lines"
    assert outline_geometry_types(result) == ["MultiLineString"]
    assert result.relation_id == 9
    assert len(client.queries) == 2
    assert '["boundary"="administrative"]' in client.queries[0]
    assert 'relation["wikidata"="Q1858"]' in client.queries[1]


def test_admin_relation_first(config):
    client = FakeOverpassClient(relation(3, way_member(1, "outer", *CLOSED_A)))
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q1")
    assert result.source == "admin-relation"
    assert outline_geometry_types(result) == ["Polygon"]
    assert result.geojson.features[0].properties["qid"] == "Q1"
    assert len(client.queries) == 1


def test_way_fallback(config):
    client = FakeOverpassClient(
        {"elements": []},
        {"elements": []},
        {"elements": [{"type": "way", "id": 4, "geometry": geom((0, 0), (1, 1))}]},
    )
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q2")
    assert result.source == "way-fallback"
    assert outline_geometry_types(result) == ["LineString"]


def test_transport_error_moves_to_next_query(config):
    client = FakeOverpassClient(
        RuntimeError("Overpass API HTTP error 400"),
        relation(3, way_member(1, "outer", *CLOSED_A)),
    )
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q3")
    assert result.source == "generic-relation"


def test_all_empty(config):
    client = FakeOverpassClient({"elements": []}, {"elements": []}, {"elements": []})
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q4")
    assert result.geojson is None
    assert result.source == "empty-elements"


def test_all_failed(config):
    client = FakeOverpassClient(RuntimeError("a"), RuntimeError("b"), RuntimeError("c"))
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q5")
    assert result.source == "http-error"


def test_elements_without_geometry(config):
    client = FakeOverpassClient({"elements": [{"type": "relation", "id": 1, "members": []}]})
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q6")
    assert result.geojson is None
    assert result.source == "no-geometry"


def test_invalid_identifier(config):
    client = FakeOverpassClient()
    for qid in ["1858", "q1858", "Q18a", "", None]:
        assert OutlineResolver(client, config).fetch_outline_by_identifier(qid).source == "invalid-id"
    assert client.queries == []


def test_outline_by_relation_id_resolves_top_level_geometry(config):
    data = {"elements": [
        {"type": "relation", "id": 7, "members": [{"type": "way", "ref": 70, "role": "outer"}]},
        {"type": "way", "id": 70, "geometry": geom(*CLOSED_A)},
    ]}
    client = FakeOverpassClient(data)
    result = OutlineResolver(client, config).fetch_outline_by_relation_id(7)
    assert result.source == "single-query"
    assert result.relation_id == 7
    assert outline_geometry_types(result) == ["Polygon"]
    assert "out body;\n>;\nout geom qt;" in client.queries[0]


def test_outline_by_relation_id_diagnostics(config):
    assert OutlineResolver(FakeOverpassClient(), config).fetch_outline_by_relation_id(0).source == "invalid-id"
    assert OutlineResolver(
        FakeOverpassClient(RuntimeError("down")), config
    ).fetch_outline_by_relation_id(7).source == "http-error"
    assert OutlineResolver(
        FakeOverpassClient({"elements": []}), config
    ).fetch_outline_by_relation_id(7).source == "empty-elements"
    assert OutlineResolver(
        FakeOverpassClient({"elements": [{"type": "node", "id": 1, "lat": 0, "lon": 0}]}), config
    ).fetch_outline_by_relation_id(7).source == "no-geometry"


def test_way_without_id_has_no_geometry(config):
    client = FakeOverpassClient({"elements": [{"type": "way", "geometry": geom((0.0, 0.0), (1.0, 1.0))}]})
    result = OutlineResolver(client, config).fetch_outline_by_identifier("Q1")
    assert result.geojson is None
    assert result.source == "no-geometry"


def test_conversion_error_is_reported_as_no_geometry(config, monkeypatch):
    import opendatamap.boundary.outline as outline

    def broken(data, properties=None):
        raise TypeError("bad element")

    monkeypatch.setattr(outline, "overpass_to_geojson", broken)
    data = relation(1, way_member(1, "outer", *CLOSED_A))
    assert OutlineResolver(FakeOverpassClient(data), config).fetch_outline_by_identifier("Q1").source == "no-geometry"
    assert OutlineResolver(FakeOverpassClient(data), config).fetch_outline_by_relation_id(1).source == "no-geometry"


def test_non_dict_response_is_empty(config):
    client = FakeOverpassClient(["elements"], ["elements"], ["elements"])
    assert OutlineResolver(client, config).fetch_outline_by_identifier("Q1").source == "empty-elements"
