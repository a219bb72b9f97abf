"""
Shared fixtures: fake Overpass / Wikidata clients and canned responses
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from opendatamap.config import PipelineConfig
from opendatamap.models import PopulationData


def geom(*points):
    """[(lon, lat), ...] -> Overpass 'out geom' geometry list"""
    return [{"lat": lat, "lon": lon} for lon, lat in points]


def way_member(ref, role, *points):
    return {"type": "way", "ref": ref, "role": role, "geometry": geom(*points)}


class FakeOverpassClient:
    """Returns queued responses in order and records queries"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.queries = []

    def query(self, query, retry_delay=None):
        self.queries.append(query)
        if not self.responses:
            return {"elements": []}
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakePopulationResolver:
    def __init__(self, data=None):
        self.data = data or PopulationData()
        self.calls = []

    def fetch_population_data(self, osm_relation_id):
        self.calls.append(osm_relation_id)
        return self.data


class FakeSparqlClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.queries = []

    def query(self, sparql):
        self.queries.append(sparql)
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def config():
    cfg = PipelineConfig()
    cfg.api.min_request_interval = 0.0
    cfg.api.retry_delay = 0.0
    return cfg


@pytest.fixture
def square_ward_response():
    """
    Relation 1001: two outer ways forming a 0.01° square near the equator
    (second way stored reversed), one inner way closing a hole, a label node
    and one sub-area relation.
    """
    return {
        "elements": [
            {
                "type": "relation",
                "id": 1001,
                "tags": {"name": "Test Ward", "boundary": "administrative"},
                "members": [
                    way_member(1, "outer", (0.0, 0.0), (0.01, 0.0), (0.01, 0.01)),
                    way_member(2, "outer", (0.0, 0.0), (0.0, 0.01), (0.01, 0.01)),
                    way_member(
                        3, "inner",
                        (0.004, 0.004), (0.006, 0.004), (0.006, 0.006), (0.004, 0.006), (0.004, 0.004)
                    ),
                    {"type": "node", "ref": 50, "role": "label", "lat": 0.005, "lon": 0.005},
                    {"type": "relation", "ref": 2002, "role": "subarea"},
                ],
            }
        ]
    }
