"""
Export package — CSV, GeoJSON and shareable view-state tokens.

Public API:
    to_csv, write_csv, to_feature_collection, write_geojson,
    ViewState, encode_view_state, decode_view_state
"""

from exporting.geojson import to_feature_collection, write_geojson
from exporting.tabular import to_csv, write_csv
from exporting.view_state import ViewState, decode_view_state, encode_view_state

__all__ = [
    "to_csv",
    "write_csv",
    "to_feature_collection",
    "write_geojson",
    "ViewState",
    "encode_view_state",
    "decode_view_state",
]
