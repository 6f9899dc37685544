"""
Angle Calculator Utility
Calculates joint angles from pose keypoints.
"""

import math
from typing import Optional

import numpy as np


def compute_joint_angle(p1, p2, p3) -> Optional[float]:
    """
    Calculate the interior angle at vertex p2 between rays p2->p1 and p2->p3.

    Args:
        p1: First point (anything with x, y)
        p2: Vertex point where angle is measured
        p3: Second point

    Returns:
        Angle in degrees [0, 180], or None if any point is missing or
        its coordinates are not finite numbers.
    """
    if p1 is None or p2 is None or p3 is None:
        return None

    try:
        a = np.array([p1.x, p1.y], dtype=np.float64)
        v = np.array([p2.x, p2.y], dtype=np.float64)
        b = np.array([p3.x, p3.y], dtype=np.float64)
    except (AttributeError, TypeError, ValueError):
        return None

    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(v)) and np.all(np.isfinite(b))):
        return None

    # Polar angle of each ray from the vertex
    va = a - v
    vb = b - v
    radians = np.arctan2(vb[1], vb[0]) - np.arctan2(va[1], va[0])
    angle = abs(float(np.degrees(radians)))

    # Fold reflex angles back into [0, 180]
    if angle > 180.0:
        angle = 360.0 - angle

    return angle if math.isfinite(angle) else None
