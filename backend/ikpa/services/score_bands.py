"""Score band classification: final score to qualitative label and colour."""
from dataclasses import dataclass
from typing import Sequence, Tuple

from ikpa.services.scoring_exceptions import ConfigurationError
from ikpa.utils.numbers import clamp


@dataclass(frozen=True)
class ScoreBand:
    """Half-open score range ``[lower, upper)`` with a label and display colour."""

    lower: float
    upper: float
    label: str
    color: str


class ScoreBandTable:
    """
    Ordered, gap-free band table covering ``[0, 100]``.

    Each band covers ``[lower, upper)``; the highest band also includes 100.
    The table is validated once at construction.
    """

    def __init__(self, bands: Sequence[ScoreBand], min_score: float = 0, max_score: float = 100):
        if not bands:
            raise ConfigurationError("Score band table is empty")
        ordered = sorted(bands, key=lambda band: band.lower)
        if ordered[0].lower != min_score:
            raise ConfigurationError(f"Lowest band must start at {min_score}")
        if ordered[-1].upper != max_score:
            raise ConfigurationError(f"Highest band must end at {max_score}")
        for band in ordered:
            if band.lower >= band.upper:
                raise ConfigurationError(f"Band '{band.label}' has an empty range")
        for below, above in zip(ordered, ordered[1:]):
            if below.upper != above.lower:
                raise ConfigurationError(
                    f"Bands '{below.label}' and '{above.label}' overlap or leave a gap"
                )
        self.bands: Tuple[ScoreBand, ...] = tuple(ordered)
        self.min_score = min_score
        self.max_score = max_score

    def classify(self, score: float) -> ScoreBand:
        value = clamp(score, self.min_score, self.max_score)
        for band in self.bands:
            if band.lower <= value < band.upper:
                return band
        return self.bands[-1]

    def get_label(self, score: float) -> str:
        return self.classify(score).label

    def get_color(self, score: float) -> str:
        return self.classify(score).color

    def to_list(self) -> list:
        return [
            {"min": band.lower, "max": band.upper, "label": band.label, "color": band.color}
            for band in reversed(self.bands)
        ]


DEFAULT_SCORE_BANDS = ScoreBandTable(
    [
        ScoreBand(85, 100, "Excellent", "#10B981"),
        ScoreBand(70, 85, "Good", "#84CC16"),
        ScoreBand(50, 70, "Fair", "#F59E0B"),
        ScoreBand(30, 50, "Needs Attention", "#F97316"),
        ScoreBand(0, 30, "Critical", "#EF4444"),
    ]
)


def get_score_label(score: float) -> str:
    return DEFAULT_SCORE_BANDS.get_label(score)


def get_score_color(score: float) -> str:
    return DEFAULT_SCORE_BANDS.get_color(score)

