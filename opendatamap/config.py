"""
Configuration settings for the OpenDataMap boundary engine
"""

from dataclasses import dataclass, field
import os


@dataclass
class APIConfig:
    """API endpoints and configuration"""
    # Overpass API (OSM)
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    overpass_timeout: int = 25  # Server-side [timeout:N] for queries

    # Wikidata SPARQL endpoint (population / area statistics)
    wikidata_sparql_url: str = "https://query.wikidata.org/sparql"

    # Request settings
    request_timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 1.0
    min_request_interval: float = 1.0

    # User agent for API requests
    user_agent: str = "OpenDataMapBoundaryEngine/0.1"


@dataclass
class StitchingConfig:
    """Way stitching parameters"""
    # Endpoint match tolerance in degrees (~11 m), applied per axis.
    # OSM stores 7 decimal digits, so exact joins are well inside this.
    endpoint_tolerance_deg: float = 0.0001

    # Smallest closed ring worth emitting (3 distinct points + closing point)
    min_ring_vertices: int = 4


@dataclass
class PipelineConfig:
    """Engine configuration"""
    api: APIConfig = field(default_factory=APIConfig)
    stitching: StitchingConfig = field(default_factory=StitchingConfig)

    # Tag keys tried in order when naming a relation
    name_tags: tuple = ("name", "name:vi", "name:en", "official_name")

    # Worker threads for fetches that overlap with stitching
    max_workers: int = 2


# Global config instance
config = PipelineConfig()


def get_config() -> PipelineConfig:
    """Get global configuration"""
    return config


def load_config_from_env(base: PipelineConfig = None) -> PipelineConfig:
    """
    Apply OPENDATAMAP_* environment overrides to a configuration

    Args:
        base: Configuration to update (defaults to the global instance)

    Returns:
        The updated configuration
    """
    cfg = base or config

    overpass_url = os.environ.get("OPENDATAMAP_OVERPASS_URL")
    if overpass_url:
        cfg.api.overpass_url = overpass_url

    sparql_url = os.environ.get("OPENDATAMAP_WIKIDATA_SPARQL_URL")
    if sparql_url:
        cfg.api.wikidata_sparql_url = sparql_url

    tolerance = os.environ.get("OPENDATAMAP_ENDPOINT_TOLERANCE")
    if tolerance:
        try:
            cfg.stitching.endpoint_tolerance_deg = float(tolerance)
        except ValueError:
            raise ValueError(f"OPENDATAMAP_ENDPOINT_TOLERANCE must be a number, got {tolerance!r}")

    return cfg


def validate_config(config: PipelineConfig) -> None:
    """
    Validate that all required configuration values are set.
    Raises ValueError if any required value is missing or invalid.
    """
    errors = []

    if not hasattr(config, 'api') or config.api is None:
        errors.append("api configuration is required but not set")
    else:
        if not config.api.overpass_url:
            errors.append("api.overpass_url is required but not set")
        if not config.api.wikidata_sparql_url:
            errors.append("api.wikidata_sparql_url is required but not set")
        if config.api.max_retries < 1:
            errors.append(f"api.max_retries must be at least 1, got {config.api.max_retries}")
        if config.api.overpass_timeout <= 0:
            errors.append(f"api.overpass_timeout must be positive, got {config.api.overpass_timeout}")

    if not hasattr(config, 'stitching') or config.stitching is None:
        errors.append("stitching configuration is required but not set")
    else:
        if config.stitching.endpoint_tolerance_deg < 0:
            errors.append(
                f"stitching.endpoint_tolerance_deg must not be negative, got {config.stitching.endpoint_tolerance_deg}"
            )
        if config.stitching.min_ring_vertices < 4:
            errors.append(
                f"stitching.min_ring_vertices must be at least 4, got {config.stitching.min_ring_vertices}"
            )

    if config.max_workers < 1:
        errors.append(f"max_workers must be at least 1, got {config.max_workers}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ValueError(error_msg)
