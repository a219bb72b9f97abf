"""
Tests for the Wikidata population / area resolver
"""

import pytest

from opendatamap.collectors.wikidata.population import (
    PopulationResolver,
    fetch_population_data,
    parse_area,
    parse_population,
)
from conftest import FakeSparqlClient


def sparql_response(**values):
    binding = {key: {"type": "literal", "value": value} for key, value in values.items()}
    return {"head": {"vars": ["population", "area"]}, "results": {"bindings": [binding]}}


def test_population_and_area_parsed():
    client = FakeSparqlClient(sparql_response(population="118500", area="9.43"))
    result = PopulationResolver(client).fetch_population_data(1903516)
    assert result.population == 118500
    assert result.official_area == pytest.approx(9.43)
    assert 'wdt:P402 "1903516"' in client.queries[0]


def test_no_matching_record_returns_nulls():
    client = FakeSparqlClient({"head": {}, "results": {"bindings": []}})
    result = PopulationResolver(client).fetch_population_data(42)
    assert result.population is None
    assert result.official_area is None


def test_transport_failure_returns_nulls():
    client = FakeSparqlClient(error=RuntimeError("Wikidata SPARQL timeout after 3 attempts"))
    result = PopulationResolver(client).fetch_population_data(42)
    assert result.population is None
    assert result.official_area is None


def test_malformed_payload_returns_nulls():
    client = FakeSparqlClient(["not", "a", "dict"])
    result = fetch_population_data(42, client=client)
    assert result.population is None and result.official_area is None


def test_malformed_values_are_treated_as_absent():
    client = FakeSparqlClient(sparql_response(population="unknown", area="n/a"))
    result = PopulationResolver(client).fetch_population_data(7)
    assert result.population is None
    assert result.official_area is None


def test_only_population_present():
    client = FakeSparqlClient(sparql_response(population="5000"))
    result = PopulationResolver(client).fetch_population_data(7)
    assert result.population == 5000
    assert result.official_area is None


def test_invalid_relation_id_does_not_query():
    client = FakeSparqlClient(sparql_response(population="1"))
    result = PopulationResolver(client).fetch_population_data("abc")
    assert result.population is None
    assert client.queries == []


@pytest.mark.parametrize("value,expected", [
    ("1200", 1200),
    ("+1200", 1200),
    ("1200.7", 1200),
    ("1.2E3", 1200),
    ("", None),
    (None, None),
    ("abc", None),
    ("nan", None),
])
def test_parse_population(value, expected):
    assert parse_population(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("9.43", 9.43),
    ("12", 12.0),
    ("inf", None),
    ("x", None),
    (None, None),
])
def test_parse_area(value, expected):
    assert parse_area(value) == expected


@pytest.mark.parametrize("bindings", [
    ["oops"],
    {"population": {"type": "literal", "value": "5"}},
    "bindings",
])
def test_malformed_bindings_return_nulls(bindings):
    client = FakeSparqlClient({"results": {"bindings": bindings}})
    result = fetch_population_data(42, client=client)
    assert result.population is None and result.official_area is None


def test_non_dict_binding_entries_are_skipped():
    response = sparql_response(population="1200")
    response["results"]["bindings"].insert(0, "oops")
    assert fetch_population_data(42, client=FakeSparqlClient(response)).population == 1200
