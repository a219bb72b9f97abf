"""
Overpass QL query builders
"""

from typing import Iterable


def relation_geom_query(relation_id: int, timeout: int) -> str:
    """Full member geometry for a single relation"""
    return f"[out:json][timeout:{timeout}];\nrelation({relation_id});\nout geom;"


def relation_recursive_query(relation_id: int, timeout: int) -> str:
    """Relation body plus its recursed ways and nodes with geometry"""
    return f"[out:json][timeout:{timeout}];\nrelation({relation_id});\nout body;\n>;\nout geom qt;"


def relation_tags_query(relation_ids: Iterable[int], timeout: int) -> str:
    """Tags only, for naming several relations in one request"""
    ids = ",".join(str(i) for i in relation_ids)
    return f"[out:json][timeout:{timeout}];\nrelation(id:{ids});\nout tags;"


def element_geom_query(element_type: str, ref: int, timeout: int) -> str:
    """Geometry for a single node, way or relation"""
    return f"[out:json][timeout:{timeout}];\n{element_type}({ref});\nout geom;"


def admin_relation_by_qid(qid: str, timeout: int) -> str:
    return (
        f"[out:json][timeout:{timeout}];\n"
        f"relation\n"
        f"  [\"wikidata\"=\"{qid}\"]\n"
        f"  [\"type\"=\"boundary\"]\n"
        f"  [\"boundary\"=\"administrative\"];\n"
        f"out geom;"
    )


def relation_by_qid(qid: str, timeout: int) -> str:
    return f"[out:json][timeout:{timeout}];\nrelation[\"wikidata\"=\"{qid}\"];\nout geom;"


def way_by_qid(qid: str, timeout: int) -> str:
    return f"[out:json][timeout:{timeout}];\nway[\"wikidata\"=\"{qid}\"];\nout geom;"
