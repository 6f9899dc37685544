"""
Utils: Visualization
Drawing helpers for the pose scorer: skeleton, keypoints and score overlay.
"""

import math
from typing import Optional, Tuple

import cv2
import numpy as np

import config

from pose_scoring.landmarks import POSE_CONNECTIONS
from pose_scoring.models import KeypointSet, PoseConfig, ScoreResult, get_keypoint, keypoint_confidence


def _to_pixel(keypoint, scale: float) -> Optional[Tuple[int, int]]:
    """Scaled integer pixel position, None if coordinates are unusable."""
    try:
        x = float(keypoint.x) * scale
        y = float(keypoint.y) * scale
    except (AttributeError, TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return int(round(x)), int(round(y))


def draw_skeleton(
    keypoints: KeypointSet,
    min_confidence: float,
    surface: np.ndarray,
    scale: float = 1.0
) -> None:
    """
    Draw skeleton connections onto surface in place.

    A connection is drawn only when both endpoints exist and have
    confidence strictly above min_confidence.

    Args:
        keypoints: Keypoints in landmark order
        min_confidence: Confidence threshold
        surface: BGR image
        scale: Factor applied to keypoint coordinates
    """
    if not keypoints:
        return

    for start, end in POSE_CONNECTIONS:
        kp1 = get_keypoint(keypoints, start)
        kp2 = get_keypoint(keypoints, end)
        if kp1 is None or kp2 is None:
            continue
        if keypoint_confidence(kp1) <= min_confidence or keypoint_confidence(kp2) <= min_confidence:
            continue

        pt1 = _to_pixel(kp1, scale)
        pt2 = _to_pixel(kp2, scale)
        if pt1 is None or pt2 is None:
            continue
        cv2.line(surface, pt1, pt2, config.COLOR_SKELETON, config.LINE_WIDTH)


def draw_keypoints(
    keypoints: KeypointSet,
    min_confidence: float,
    surface: np.ndarray,
    scale: float = 1.0
) -> None:
    """Draw a filled circle for every keypoint above min_confidence."""
    if not keypoints:
        return

    for kp in keypoints:
        if kp is None or keypoint_confidence(kp) <= min_confidence:
            continue
        center = _to_pixel(kp, scale)
        if center is None:
            continue
        cv2.circle(surface, center, config.KEYPOINT_RADIUS, config.COLOR_KEYPOINT, -1)


def is_positive_feedback(message: str) -> bool:
    """Good-form messages are shown in green."""
    text = message.lower()
    return 'good' in text or 'perfect' in text


def _put_angle_label(
    frame: np.ndarray,
    angle: float,
    position: Tuple[int, int],
    label: str,
    in_tolerance: bool
) -> None:
    color = config.COLOR_GREEN if in_tolerance else config.COLOR_ORANGE
    text = f"{label}: {angle:.0f} deg"
    cv2.putText(frame, text, position,
                cv2.FONT_HERSHEY_SIMPLEX, config.FONT_SCALE * 0.7, color, 1)


def draw_angle_indicator(
    frame: np.ndarray,
    angle: float,
    position: Tuple[int, int],
    label: str = "Angle",
    in_tolerance: bool = True
) -> np.ndarray:
    """
    Draw a joint angle label with color.

    Args:
        frame: Image
        angle: Angle to display
        position: (x, y) where to draw
        label: Label
        in_tolerance: Green if True, orange otherwise
    """
    frame_copy = frame.copy()
    _put_angle_label(frame_copy, angle, position, label, in_tolerance)
    return frame_copy


def draw_rule_angles(
    frame: np.ndarray,
    keypoints: KeypointSet,
    pose_config: PoseConfig,
    result: ScoreResult,
    scale: float = 1.0
) -> np.ndarray:
    """Label each evaluated rule's angle next to its vertex, on one copy of frame."""
    frame_copy = frame.copy()
    for evaluation in result.rule_results:
        rule = pose_config.get(evaluation.name)
        if rule is None:
            continue
        vertex = get_keypoint(keypoints, rule.p2)
        position = _to_pixel(vertex, scale) if vertex is not None else None
        if position is None:
            continue
        _put_angle_label(
            frame_copy,
            evaluation.angle,
            (position[0] + 8, position[1] - 8),
            label=rule.name,
            in_tolerance=evaluation.deviation <= rule.tolerance
        )
    return frame_copy


def draw_score_overlay(
    frame: np.ndarray,
    pose_name: Optional[str],
    result: ScoreResult
) -> np.ndarray:
    """
    Draw accuracy and feedback messages.

    Args:
        frame: Image
        pose_name: Display name of the active pose
        result: Score for this frame
    """
    frame_copy = frame.copy()
    h, w = frame_copy.shape[:2]

    line_height = 24
    box_height = 50 + line_height * len(result.feedback)
    top = max(5, h - box_height - 5)

    # Background box
    cv2.rectangle(frame_copy, (5, top), (w - 5, h - 5), config.COLOR_BLACK, -1)
    cv2.rectangle(frame_copy, (5, top), (w - 5, h - 5), config.COLOR_GREEN, 2)

    # Pose name + accuracy
    title = f"{pose_name}: {result.accuracy:.0f}%" if pose_name else f"Accuracy: {result.accuracy:.0f}%"
    cv2.putText(frame_copy, title, (15, top + 30),
                cv2.FONT_HERSHEY_SIMPLEX, config.FONT_SCALE, config.COLOR_WHITE, 2)

    # Accuracy bar
    bar_width = int((w - 30) * result.accuracy / 100)
    cv2.rectangle(frame_copy, (15, top + 38), (15 + bar_width, top + 42), config.COLOR_GREEN, -1)

    # Feedback
    for i, message in enumerate(result.feedback):
        color = config.COLOR_GREEN if is_positive_feedback(message) else config.COLOR_ORANGE
        cv2.putText(frame_copy, message, (15, top + 42 + line_height * (i + 1)),
                    cv2.FONT_HERSHEY_SIMPLEX, config.FONT_SCALE * 0.8, color, 1)

    return frame_copy
