"""
Tabular export — comma-delimited text of the filtered records.

The header is taken from the scalar properties of the first record.  A value
containing a comma is wrapped in double quotes; embedded quotes and newlines
are written as-is, so such values do not round-trip through a CSV reader.
"""

from pathlib import Path
from typing import Any, List, Optional, Sequence

from demand_core.config import config
from demand_core.errors import EmptyExportError
from demand_core.logging import get_logger
from demand_core.types import ScoredFeature
from exporting.geojson import feature_properties

logger = get_logger("export")

CSV_FILENAME = "pedestrian_demandrank.csv"
_EXCLUDED = {"geometry", "position", "coordinates"}


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if "," in text:
        return f'"{text}"'
    return text


def csv_headers(feature: ScoredFeature) -> List[str]:
    """Scalar property names of a representative record, position excluded."""
    return [
        key for key, value in feature_properties(feature).items()
        if key not in _EXCLUDED and _is_scalar(value)
    ]


def to_csv(features: Sequence[ScoredFeature]) -> str:
    if not features:
        raise EmptyExportError("CSV")
    headers = csv_headers(features[0])
    lines = [",".join(headers)]
    for feature in features:
        properties = feature_properties(feature)
        lines.append(",".join(_cell(properties.get(h)) for h in headers))
    return "\n".join(lines) + "\n"


def write_csv(features: Sequence[ScoredFeature], path: Optional[str] = None) -> Path:
    """Write the CSV document to *path* (default: exports dir)."""
    target = Path(path) if path else Path(config.get("paths.exports_dir")) / CSV_FILENAME
    document = to_csv(features)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w") as f:
        f.write(document)
    logger.info(f"Exported {len(features)} rows to {target}")
    return target
