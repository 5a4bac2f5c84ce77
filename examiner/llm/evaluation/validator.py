"""Repair assessor output before it is stored or shown.

Out-of-range scores usually mean the respondent talked the assessor into
something, so every correction is logged as a warning.
"""

from __future__ import annotations

import logging
import math

from examiner.lib.util import truncate

from .result import Assessment, Correction, RawAssessment

logger = logging.getLogger(__name__)

MAX_FEEDBACK_LENGTH = 5000
MAX_FOLLOWUP_LENGTH = 5000


def validate_assessment(raw: RawAssessment, max_points: int) -> Assessment:
    corrections: list[Correction] = []

    original = raw.score
    score = original if math.isfinite(original) else 0.0
    score = max(0.0, min(float(max_points), score))
    if score != original:
        if score == 0:
            correction, msg = Correction.ClampedLower, "assessor score clamped to lower bound (0)"
        elif score == max_points:
            correction, msg = Correction.ClampedUpper, "assessor score clamped to upper bound (max_points)"
        else:
            correction, msg = Correction.Clamped, "assessor score clamped"
        corrections.append(correction)
        logger.warning(
            f"{msg} - possible prompt injection",
            extra={
                "original_score": original,
                "max_points": max_points,
                "clamped_score": score,
            },
        )

    if raw.max_points != max_points:
        corrections.append(Correction.MaxPointsMismatch)
        logger.warning(
            "assessor returned mismatched max_points - overriding",
            extra={
                "assessor_max_points": raw.max_points,
                "actual_max_points": max_points,
            },
        )

    feedback, cut = truncate(raw.feedback, MAX_FEEDBACK_LENGTH)
    if cut:
        corrections.append(Correction.FeedbackTruncated)
        logger.warning("assessor feedback truncated", extra={"max_len": MAX_FEEDBACK_LENGTH})

    followup, cut = truncate(raw.followup_question, MAX_FOLLOWUP_LENGTH)
    if cut:
        corrections.append(Correction.FollowupTruncated)
        logger.warning("assessor follow-up question truncated", extra={"max_len": MAX_FOLLOWUP_LENGTH})

    return Assessment(
        score=score,
        max_points=max_points,
        feedback=feedback,
        need_followup=raw.need_followup,
        followup_question=followup,
        corrections=tuple(corrections),
    )
