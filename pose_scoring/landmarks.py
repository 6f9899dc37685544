"""
Landmark Schema
Fixed BlazePose / MediaPipe Pose landmark order shared by rule authoring,
scoring and the skeleton renderer.
"""

from enum import IntEnum
from typing import List, Optional, Tuple, Union


class Landmark(IntEnum):
    """BlazePose landmark name -> index in the detector output."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


# Skeleton drawn by the renderer (torso, arms, legs)
POSE_CONNECTIONS: List[Tuple[Landmark, Landmark]] = [
    # Torso
    (Landmark.LEFT_SHOULDER, Landmark.RIGHT_SHOULDER),
    (Landmark.LEFT_SHOULDER, Landmark.LEFT_HIP),
    (Landmark.RIGHT_SHOULDER, Landmark.RIGHT_HIP),
    (Landmark.LEFT_HIP, Landmark.RIGHT_HIP),
    # Left arm
    (Landmark.LEFT_SHOULDER, Landmark.LEFT_ELBOW),
    (Landmark.LEFT_ELBOW, Landmark.LEFT_WRIST),
    # Right arm
    (Landmark.RIGHT_SHOULDER, Landmark.RIGHT_ELBOW),
    (Landmark.RIGHT_ELBOW, Landmark.RIGHT_WRIST),
    # Left leg
    (Landmark.LEFT_HIP, Landmark.LEFT_KNEE),
    (Landmark.LEFT_KNEE, Landmark.LEFT_ANKLE),
    # Right leg
    (Landmark.RIGHT_HIP, Landmark.RIGHT_KNEE),
    (Landmark.RIGHT_KNEE, Landmark.RIGHT_ANKLE),
]


def landmark_from_name(name: str) -> Optional[Landmark]:
    """
    Look up a landmark by name.

    Accepts the snake_case names used in pose files ("left_knee"),
    as well as "Left Knee" or "LEFT_KNEE".
    """
    key = "_".join(str(name).strip().replace("-", " ").split()).upper()
    return Landmark.__members__.get(key)


def resolve_landmark(ref: Union[int, str, Landmark]) -> Optional[int]:
    """Turn a landmark name or index into an index. Returns None if unknown."""
    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return int(ref)
    if isinstance(ref, str):
        stripped = ref.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
        landmark = landmark_from_name(stripped)
        return int(landmark) if landmark is not None else None
    return None
