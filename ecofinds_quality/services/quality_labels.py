"""
Score-to-label mapping for the listing upload UI.

Four bands relative to the threshold `t`:

    score < 0.5 t   very blurry
    score < t       somewhat blurry
    score < 1.5 t   good
    otherwise       excellent
"""

from __future__ import annotations

from ecofinds_quality.schemas.blur import BlurAnalysis, QualityBand, QualityReport
from ecofinds_quality.services.blur_service import round_half_up

_TEXT = {
    QualityBand.very_blurry: "Very blurry",
    QualityBand.somewhat_blurry: "Somewhat blurry",
    QualityBand.good: "Good quality",
    QualityBand.excellent: "Excellent quality",
}

_COLOR = {
    QualityBand.very_blurry: "text-red-600",
    QualityBand.somewhat_blurry: "text-yellow-600",
    QualityBand.good: "text-green-600",
    QualityBand.excellent: "text-green-700",
}

_ADVICE = {
    QualityBand.very_blurry: "Please upload a clearer image",
    QualityBand.somewhat_blurry: "Consider uploading a sharper image",
}


def quality_band(score: float, threshold: float = 100.0) -> QualityBand:
    if score < threshold * 0.5:
        return QualityBand.very_blurry
    if score < threshold:
        return QualityBand.somewhat_blurry
    if score < threshold * 1.5:
        return QualityBand.good
    return QualityBand.excellent


def quality_text(score: float, threshold: float = 100.0) -> str:
    return _TEXT[quality_band(score, threshold)]


def quality_color(score: float, threshold: float = 100.0) -> str:
    return _COLOR[quality_band(score, threshold)]


def quality_advice(score: float, threshold: float = 100.0) -> str | None:
    return _ADVICE.get(quality_band(score, threshold))


def sharpness_percent(score: float, threshold: float = 100.0) -> int:
    """Position of `score` on a 0..2t scale, as a clamped percentage."""
    percent = score / (threshold * 2) * 100
    return round_half_up(min(100.0, max(0.0, percent)))


def build_quality_report(analysis: BlurAnalysis) -> QualityReport:
    score, threshold = analysis.blur_score, analysis.threshold
    band = quality_band(score, threshold)
    return QualityReport(
        band=band,
        text=_TEXT[band],
        color=_COLOR[band],
        advice=_ADVICE.get(band),
        status="Needs Improvement" if analysis.is_blurry else "Good",
        sharpness_percent=sharpness_percent(score, threshold),
    )
