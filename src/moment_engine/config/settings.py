"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Clustering
    cluster_merge_threshold: float = 0.22
    near_duplicate_threshold: float = 0.55
    centroid_size: int = 12
    max_clusters_floor: int = 6
    max_clusters_ceiling: int = 10
    same_category_clustering: bool = False

    # Quality weights (re-normalized by the combiner)
    w_signal_density: float = 0.28
    w_velocity: float = 0.22
    w_narrative_coherence: float = 0.28
    w_cultural_legibility: float = 0.22

    # Quality thresholds
    min_overall: float = 0.68
    min_signal_density: float = 0.55
    min_velocity: float = 0.45
    min_narrative_coherence: float = 0.55
    min_cultural_legibility: float = 0.50
    min_unique_sources: int = 2
    min_total_signals: int = 4
    compute_maturity_on_fail: bool = False

    # Velocity histogram
    velocity_bin_ms: int = 60 * 60 * 1000
    velocity_bins: int = 12
    velocity_recent_portion: float = 0.25

    # Moment memory
    decay_horizon_hours: int = 72

    # Collection
    source_timeout_seconds: float = 8.0
    collection_budget_seconds: float = 20.0
    hn_base_url: str = "https://hacker-news.firebaseio.com/v0"
    hn_limit: int = 30

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_prefix": "MOMENT_"}
