"""
Wikidata SPARQL client
"""

from typing import Dict, Any, List, Optional

from ..http import post_with_retries
from ...config import get_config, PipelineConfig


class WikidataSparqlClient:
    """Client for the Wikidata Query Service"""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or get_config()
        self.sparql_url = self.config.api.wikidata_sparql_url

    def query(self, sparql: str) -> Dict[str, Any]:
        """
        Execute a SPARQL SELECT query

        Returns:
            JSON response ({"head": ..., "results": {"bindings": [...]}})

        Raises:
            RuntimeError: If query fails after all retries
        """
        headers = {
            "User-Agent": self.config.api.user_agent,
            "Accept": "application/sparql-results+json",
            "Content-Type": "application/x-www-form-urlencoded"
        }
        return post_with_retries(
            self.sparql_url,
            data={"query": sparql, "format": "json"},
            headers=headers,
            api=self.config.api,
            service="Wikidata SPARQL"
        )

    @staticmethod
    def bindings(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Extract result bindings, tolerating missing keys"""
        if not isinstance(data, dict):
            return []
        results = data.get("results")
        if not isinstance(results, dict):
            return []
        bindings = results.get("bindings")
        if not isinstance(bindings, list):
            return []
        return [b for b in bindings if isinstance(b, dict)]
