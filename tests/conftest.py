import math

import pytest

from pose_scoring import AngleRule, Keypoint, Landmark, PoseConfig


def make_keypoints(overrides=None, score=0.9, count=33):
    """Full keypoint set at the origin, with some landmarks overridden."""
    keypoints = [Keypoint(0.0, 0.0, score) for _ in range(count)]
    for index, kp in (overrides or {}).items():
        keypoints[int(index)] = kp
    return keypoints


def leg_at_angle(angle_deg, score=0.9, knee=(100.0, 200.0), length=100.0):
    """Hip / knee / ankle keypoints whose knee angle is angle_deg."""
    kx, ky = knee
    hip = Keypoint(kx, ky - length, score)
    # Hip ray points straight up (-90 deg); rotate by angle_deg for the ankle ray
    theta = math.radians(-90.0 + angle_deg)
    ankle = Keypoint(kx + length * math.cos(theta), ky + length * math.sin(theta), score)
    return {
        Landmark.LEFT_HIP: hip,
        Landmark.LEFT_KNEE: Keypoint(kx, ky, score),
        Landmark.LEFT_ANKLE: ankle,
    }


def knee_rule(target=180.0, tolerance=10.0, name="left_knee", good="Left leg looks good."):
    return AngleRule(
        name=name,
        p1=Landmark.LEFT_HIP,
        p2=Landmark.LEFT_KNEE,
        p3=Landmark.LEFT_ANKLE,
        target=target,
        tolerance=tolerance,
        feedback_low="Straighten your left leg.",
        feedback_high="Bend your left knee.",
        feedback_good=good,
    )


@pytest.fixture
def knee_config():
    return PoseConfig([knee_rule()])
