"""Deterministic score -> color lookup."""

from dataclasses import dataclass
from typing import List, Tuple

RGB = Tuple[int, int, int]


def hex_to_rgb(color: str) -> RGB:
    """'#7f0000' -> (127, 0, 0)."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


@dataclass(frozen=True)
class Style:
    label: str
    color: str

    @property
    def rgb(self) -> RGB:
        return hex_to_rgb(self.color)


# Descending thresholds, first match wins.
SCORE_BUCKETS: List[Tuple[float, Style]] = [
    (70, Style("Very High", "#7f0000")),
    (60, Style("High", "#b71c1c")),
    (50, Style("Medium-High", "#d32f2f")),
    (40, Style("Medium", "#e53935")),
    (30, Style("Medium-Low", "#f44336")),
    (20, Style("Low", "#ef5350")),
]
LOWEST_STYLE = Style("Very Low", "#ffcdd2")
SIDEWALK_STYLE = Style("Existing Sidewalk", "#4caf50")


def style_for_score(score: float) -> Style:
    """Bucket style for *score*; anything below 20 (or unordered) is the lowest bucket."""
    for threshold, style in SCORE_BUCKETS:
        if score >= threshold:
            return style
    return LOWEST_STYLE


def legend() -> List[Tuple[str, str, str]]:
    """(range, label, color) rows for a legend, highest bucket first."""
    rows = []
    upper = "100"
    for threshold, style in SCORE_BUCKETS:
        rows.append((f"{threshold:g}-{upper}", style.label, style.color))
        upper = f"{threshold:g}"
    rows.append((f"0-{upper}", LOWEST_STYLE.label, LOWEST_STYLE.color))
    return rows
