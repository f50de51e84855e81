"""Risk scoring for threat submissions."""

import enum


class RiskRating(str, enum.Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    VERY_LOW = "VERY_LOW"


def severity_score(likelihood: int, impact: int) -> int:
    """Severity on a 1-25 scale: likelihood (1-5) times impact (1-5)."""
    for name, value in (("likelihood", likelihood), ("impact", impact)):
        if not 1 <= value <= 5:
            raise ValueError(f"{name} must be between 1 and 5, got {value}")
    return likelihood * impact


def severity_rating(score: int) -> RiskRating:
    if score >= 20:
        return RiskRating.CRITICAL
    if score >= 12:
        return RiskRating.HIGH
    if score >= 6:
        return RiskRating.MEDIUM
    if score >= 3:
        return RiskRating.LOW
    return RiskRating.VERY_LOW
