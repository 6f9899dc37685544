"""
Pose Analyzer - Rule-Based Angle Scoring
========================================
Scores one frame of keypoints against a pose's angle rules.

Input:  Keypoints (33 BlazePose landmarks) + PoseConfig
Output: Accuracy (0-100%) + Feedback messages
"""

import logging
import math
from typing import List, Mapping, Optional, Sequence, Union

import numpy as np

import config
from utils.angle_calculator import compute_joint_angle

from .models import (
    AngleRule,
    KeypointSet,
    PoseConfig,
    RuleEvaluation,
    ScoreResult,
    coerce_rule,
    get_keypoint,
    keypoint_confidence,
)

logger = logging.getLogger(__name__)


def mean_confidence(keypoints: Optional[KeypointSet]) -> float:
    """Average confidence over the whole keypoint set (0.0 when empty)."""
    if not keypoints:
        return 0.0
    return float(np.mean([keypoint_confidence(kp) for kp in keypoints]))


def score_deviation(
    deviation: float,
    tolerance: float,
    window: float = config.MAX_DEVIATION_WINDOW
) -> float:
    """
    Score for one rule given its deviation from target.

    1.0 inside tolerance, then a linear falloff reaching 0.0 at
    `window` degrees past the tolerance boundary.
    """
    if deviation <= tolerance:
        return 1.0
    return max(0.0, 1.0 - (deviation - tolerance) / window)


def evaluate_rule(
    keypoints: KeypointSet,
    rule: AngleRule,
    min_confidence: float = config.RULE_CONFIDENCE
) -> Optional[RuleEvaluation]:
    """
    Evaluate a single rule.

    Returns None when the rule cannot be measured on this frame
    (missing or low-confidence keypoints), so it is left out entirely.
    """
    points = [get_keypoint(keypoints, idx) for idx in (rule.p1, rule.p2, rule.p3)]
    if any(kp is None or keypoint_confidence(kp) <= min_confidence for kp in points):
        logger.debug("Rule %r skipped: keypoints missing or below %.2f", rule.name, min_confidence)
        return None

    angle = compute_joint_angle(*points)
    if angle is None:
        logger.debug("Rule %r skipped: angle not measurable", rule.name)
        return None

    try:
        target = float(rule.target)
        tolerance = float(rule.tolerance)
    except (TypeError, ValueError):
        logger.debug("Rule %r skipped: non-numeric target or tolerance", rule.name)
        return None
    if not (math.isfinite(target) and math.isfinite(tolerance)):
        return None

    deviation = abs(angle - target)
    score = score_deviation(deviation, tolerance)

    if deviation <= tolerance:
        message = rule.feedback_good
    elif angle < target:
        message = rule.feedback_low
    else:
        message = rule.feedback_high

    return RuleEvaluation(
        name=rule.name,
        angle=angle,
        deviation=deviation,
        score=score,
        feedback=message or None
    )


def normalize_rules(pose_config) -> List[AngleRule]:
    """
    Ordered, uniquely named rules from any accepted config shape.

    Entries that are not rules are dropped, and only the first rule of a
    given name is kept.
    """
    if pose_config is None:
        return []
    if isinstance(pose_config, Mapping):
        entries = [coerce_rule(name, value) for name, value in pose_config.items()]
    else:
        try:
            entries = [rule if isinstance(rule, AngleRule) else None for rule in pose_config]
        except TypeError:
            logger.debug("Ignoring pose config of type %s", type(pose_config).__name__)
            return []

    rules: List[AngleRule] = []
    seen = set()
    for rule in entries:
        if rule is None:
            logger.debug("Ignoring config entry that is not an angle rule")
            continue
        if rule.name in seen:
            logger.debug("Ignoring duplicate rule %r", rule.name)
            continue
        seen.add(rule.name)
        rules.append(rule)
    return rules


def analyze_pose(
    keypoints: Optional[KeypointSet],
    pose_config: Optional[Union[PoseConfig, Mapping[str, AngleRule], Sequence[AngleRule]]]
) -> ScoreResult:
    """
    Score one frame against a pose configuration.

    Every rule counts towards the accuracy; a rule that cannot be measured
    on this frame adds no score and no feedback.

    Args:
        keypoints: Keypoints in landmark order (entries may be None)
        pose_config: Rules for the active pose (PoseConfig, name -> rule
            mapping, or a list of AngleRule)

    Returns:
        ScoreResult with feedback messages and accuracy in [0, 100]
    """
    rules = normalize_rules(pose_config)
    keypoints = list(keypoints) if keypoints is not None else []

    framing = mean_confidence(keypoints)
    if not rules or framing < config.FRAMING_CONFIDENCE:
        logger.debug("Not framed (mean confidence %.2f)", framing)
        return ScoreResult(feedback=(config.MSG_NOT_FRAMED,), accuracy=0.0)

    rules_applied = 0
    evaluations: List[RuleEvaluation] = []
    for rule in rules:
        rules_applied += 1
        evaluation = evaluate_rule(keypoints, rule)
        if evaluation is not None:
            evaluations.append(evaluation)

    if not evaluations:
        return ScoreResult(feedback=(config.MSG_HOLD_POSE,), accuracy=0.0)

    accuracy = sum(e.score for e in evaluations) / rules_applied * 100
    accuracy = max(0.0, min(100.0, accuracy))

    feedback = tuple(e.feedback for e in evaluations if e.feedback)
    if not feedback:
        feedback = (config.MSG_ANALYZING,)

    return ScoreResult(
        feedback=feedback,
        accuracy=accuracy,
        rule_results=tuple(evaluations)
    )
