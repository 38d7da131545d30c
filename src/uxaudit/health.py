"""Website Health Score - weighted blend of the four audit dimensions."""

from uxaudit.constants import HEALTH_WEIGHTS
from uxaudit.models import PerformanceReport, Review
from uxaudit.utils import clamp_score


def compute_health_score(
    ux: float, performance: float, accessibility: float, seo: float
) -> int:
    """Blend the four dimension scores into one 0-100 health score.

    Args:
        ux: UX score
        performance: Overall performance score
        accessibility: Accessibility score
        seo: SEO score

    Returns:
        Integer health score in [0, 100]
    """
    return clamp_score(
        ux * HEALTH_WEIGHTS["ux"]
        + performance * HEALTH_WEIGHTS["performance"]
        + accessibility * HEALTH_WEIGHTS["accessibility"]
        + seo * HEALTH_WEIGHTS["seo"]
    )


def health_score_for(review: Review, performance: PerformanceReport) -> int:
    """Health score of a review (overall score as UX) and its performance report."""
    return compute_health_score(
        ux=review.score,
        performance=performance.overall_performance_score,
        accessibility=review.accessibility.score,
        seo=review.seo.score,
    )
