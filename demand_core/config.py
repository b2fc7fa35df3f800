"""
Singleton configuration loader for the DemandRank pipeline.

Reads config.json once and provides dot-notation access.  Every tunable has
a schema default in CONFIG_SCHEMA, so an absent config.json yields the
behaviour of the Connecticut statewide deployment.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from demand_core.errors import DemandConfigError
from demand_core.logging import get_logger

logger = get_logger("config")

# Each entry: (type, default_value)
# Types: str, int, float, bool, list, dict, None (any)
CONFIG_SCHEMA: Dict[str, tuple] = {
    # Paths
    "paths.data_dir":                   (str,   "data"),
    "paths.logs_dir":                   (str,   "logs"),
    "paths.exports_dir":                (str,   "data/exports"),

    # Logging
    "logging.console_level":            (str,   "INFO"),

    # Input data
    "data.chunk_pattern":               (str,   "data/demandrank_{chunk}.geojson"),
    "data.url_pattern":                 (str,   None),
    "data.chunk_size":                  (int,   10000),

    # Partition loading
    "loading.probe_window":             (int,   8),
    "loading.max_partitions":           (int,   1000),
    "loading.request_timeout_seconds":  (float, 30.0),

    # Scoring
    "scoring.default_weights":          (dict,  {
        "census": 0.20,
        "crash": 0.20,
        "funcClass": 0.20,
        "school": 0.10,
        "trail": 0.10,
        "rail": 0.10,
        "bus": 0.10,
    }),
    "scoring.balance_tolerance":        (float, 0.01),

    # Map / viewport
    "map.center_lat":                   (float, 41.6032),
    "map.center_lng":                   (float, -72.7266),
    "map.zoom":                         (float, 8.0),
    "viewport.debounce_seconds":        (float, 0.3),
    "viewport.zoom_thresholds":         (list,  [
        {"zoom": 8, "max_features": 5000},
        {"zoom": 10, "max_features": 10000},
        {"zoom": 12, "max_features": 25000},
        {"zoom": 14, "max_features": 50000},
        {"zoom": 16, "max_features": 100000},
    ]),

    # Filters
    "filters.min_score":                (float, 0.0),
    "filters.max_score":                (float, 100.0),

    # Rendering
    "rendering.max_features":           (int,   50000),
    "rendering.seed":                   (int,   None),
}

# Counts and windows that must be strictly positive
POSITIVE_KEYS = (
    "data.chunk_size",
    "loading.probe_window",
    "loading.max_partitions",
    "loading.request_timeout_seconds",
    "viewport.debounce_seconds",
    "rendering.max_features",
)


class Config:
    """Singleton configuration backed by config.json."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            inst = super().__new__(cls)
            inst._config = {}
            inst._load_config()
            cls._instance = inst
        return cls._instance

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_config(self) -> None:
        config_path = Path("config.json")
        if not config_path.exists():
            self._config = {}
            return

        with open(config_path, "r") as fh:
            self._config = json.load(fh)

        logger.info("Loaded configuration from config.json")
        self._ensure_dirs()

    def _ensure_dirs(self) -> None:
        """Best-effort directory creation for paths that don't look like files."""
        paths = self._config.get("paths", {})
        for value in paths.values():
            if isinstance(value, str) and not value.endswith((".json", ".geojson", ".csv")):
                try:
                    Path(value).mkdir(parents=True, exist_ok=True)
                except OSError:
                    logger.warning("Could not create directory %s", value)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Gets a config value by dot-separated key (e.g. ``"rendering.seed"``).

        Lookup order:
        1. Value from config.json (if present and not None)
        2. Caller-provided default (if not None)
        3. Schema default from CONFIG_SCHEMA
        4. None
        """
        value = self._get_raw(key)
        if value is not None:
            return value

        if default is not None:
            return default

        schema_entry = CONFIG_SCHEMA.get(key)
        if schema_entry is not None:
            return schema_entry[1]

        return None

    def require(self, key: str) -> Any:
        """
        Requires a config value to be explicitly set in config.json.

        Raises DemandConfigError if missing.
        """
        value = self._get_raw(key)
        if value is None:
            logger.error("Missing required config key: %s", key)
            raise DemandConfigError(key)
        return value

    def validate(self) -> List[str]:
        """
        Validates the loaded config against CONFIG_SCHEMA.

        Returns a list of warning strings for type mismatches and for
        non-positive counts or windows (POSITIVE_KEYS).
        Does NOT raise -- config.json values always take precedence.
        """
        warnings = []
        for key, (expected_type, _default) in CONFIG_SCHEMA.items():
            if expected_type is None:
                continue
            value = self._get_raw(key)
            if value is None:
                continue
            # ints are acceptable wherever a float is expected
            numeric_ok = (
                expected_type is float
                and isinstance(value, int)
                and not isinstance(value, bool)
            )
            if not numeric_ok and not isinstance(value, expected_type):
                warnings.append(
                    f"Config '{key}': expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )
                continue
            if key in POSITIVE_KEYS and value <= 0:
                warnings.append(f"Config '{key}': must be positive, got {value!r}")
        for w in warnings:
            logger.warning(w)
        return warnings

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get_raw(self, key: str) -> Any:
        """Gets value from config.json without schema fallback."""
        node: Any = self._config
        for part in key.split("."):
            if isinstance(node, dict):
                node = node.get(part)
            else:
                return None
            if node is None:
                return None
        return node

    def __repr__(self) -> str:
        return f"<Config keys={list(self._config.keys())}>"


# Module-level singleton
config = Config()
