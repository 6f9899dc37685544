import math

import pytest

import config
from pose_scoring import AngleRule, Keypoint, Landmark, PoseConfig, analyze_pose
from pose_scoring.analyzer import evaluate_rule, mean_confidence, score_deviation

from conftest import knee_rule, leg_at_angle, make_keypoints


# =============================================================================
# Gating
# =============================================================================

def test_empty_config_asks_for_framing():
    result = analyze_pose(make_keypoints(leg_at_angle(180)), PoseConfig())
    assert result.accuracy == 0
    assert result.feedback == (config.MSG_NOT_FRAMED,)


def test_missing_config_asks_for_framing():
    result = analyze_pose(make_keypoints(), None)
    assert result.accuracy == 0
    assert result.feedback == (config.MSG_NOT_FRAMED,)


def test_low_mean_confidence_asks_for_framing(knee_config):
    keypoints = make_keypoints(leg_at_angle(180, score=0.1), score=0.1)
    result = analyze_pose(keypoints, knee_config)
    assert result.accuracy == 0
    assert result.feedback == (config.MSG_NOT_FRAMED,)


def test_empty_keypoints_ask_for_framing(knee_config):
    result = analyze_pose([], knee_config)
    assert result.feedback == (config.MSG_NOT_FRAMED,)
    assert result.accuracy == 0


def test_rule_with_low_confidence_point_asks_to_hold(knee_config):
    overrides = leg_at_angle(180)
    overrides[Landmark.LEFT_ANKLE] = overrides[Landmark.LEFT_ANKLE]._replace(score=0.3)
    result = analyze_pose(make_keypoints(overrides), knee_config)
    assert result.feedback == (config.MSG_HOLD_POSE,)
    assert result.accuracy == 0


def test_skipped_rule_still_counts_towards_accuracy():
    arm_rule = AngleRule(
        name="left_arm", p1=Landmark.LEFT_SHOULDER, p2=Landmark.LEFT_ELBOW,
        p3=Landmark.LEFT_WRIST, target=180, tolerance=10,
        feedback_low="Straighten your arm.", feedback_high="", feedback_good="Arm ok.",
    )
    overrides = leg_at_angle(180)
    overrides[Landmark.LEFT_WRIST] = Keypoint(0.0, 0.0, 0.05)
    result = analyze_pose(make_keypoints(overrides), PoseConfig([knee_rule(), arm_rule]))
    assert result.accuracy == pytest.approx(50.0)
    assert result.feedback == ("Left leg looks good.",)
    assert [e.name for e in result.rule_results] == ["left_knee"]


# =============================================================================
# Scoring
# =============================================================================

def test_exact_target_scores_100(knee_config):
    result = analyze_pose(make_keypoints(leg_at_angle(180)), knee_config)
    assert result.accuracy == pytest.approx(100.0)
    assert "Left leg looks good." in result.feedback


def test_standing_pose_within_tolerance(knee_config):
    result = analyze_pose(make_keypoints(leg_at_angle(178)), knee_config)
    assert result.accuracy == pytest.approx(100.0)
    assert result.feedback == ("Left leg looks good.",)
    assert result.rule_results[0].angle == pytest.approx(178.0)


def test_bent_knee_scores_linear_falloff(knee_config):
    """
    40 deg off with tolerance 10: 30 deg past tolerance over a 45 deg window,
    so 1 - 30/45 (not 1 - 30/55). The window is 45, not tolerance + 45.
    """
    result = analyze_pose(make_keypoints(leg_at_angle(140)), knee_config)
    assert result.accuracy == pytest.approx((1 - 30 / 45) * 100)
    assert "Straighten your left leg." in result.feedback
    assert "Bend your left knee." not in result.feedback


def test_angle_above_target_gives_high_feedback():
    config_ = PoseConfig([knee_rule(target=90, tolerance=10)])
    result = analyze_pose(make_keypoints(leg_at_angle(120)), config_)
    assert result.feedback == ("Bend your left knee.",)
    assert result.accuracy == pytest.approx((1 - 20 / 45) * 100)


def test_score_is_zero_at_window_edge():
    config_ = PoseConfig([knee_rule(target=90, tolerance=10)])
    result = analyze_pose(make_keypoints(leg_at_angle(145)), config_)
    assert result.accuracy == pytest.approx(0.0, abs=1e-9)


def test_score_is_clamped_beyond_window():
    config_ = PoseConfig([knee_rule(target=60, tolerance=5)])
    result = analyze_pose(make_keypoints(leg_at_angle(180)), config_)
    assert result.accuracy == 0.0
    assert result.rule_results[0].score == 0.0


@pytest.mark.parametrize("deviation,tolerance,expected", [
    (0, 10, 1.0),
    (10, 10, 1.0),
    (32.5, 10, 0.5),
    (55, 10, 0.0),
    (90, 10, 0.0),
    (45, 0, 0.0),
])
def test_score_deviation(deviation, tolerance, expected):
    assert score_deviation(deviation, tolerance) == pytest.approx(expected)


def test_accuracy_is_mean_of_rule_scores():
    right_leg = {
        Landmark.RIGHT_HIP: Keypoint(300.0, 100.0, 0.9),
        Landmark.RIGHT_KNEE: Keypoint(300.0, 200.0, 0.9),
        Landmark.RIGHT_ANKLE: Keypoint(400.0, 200.0, 0.9),  # 90 deg
    }
    right_rule = AngleRule(
        name="right_knee", p1=Landmark.RIGHT_HIP, p2=Landmark.RIGHT_KNEE,
        p3=Landmark.RIGHT_ANKLE, target=180, tolerance=0,
        feedback_low="Straighten your right leg.",
    )
    overrides = {**leg_at_angle(180), **right_leg}
    result = analyze_pose(make_keypoints(overrides), PoseConfig([knee_rule(), right_rule]))
    assert result.accuracy == pytest.approx(50.0)
    assert result.feedback == ("Left leg looks good.", "Straighten your right leg.")


def test_rule_order_changes_feedback_order_not_score():
    a = knee_rule(name="a", good="first")
    b = knee_rule(name="b", target=90, tolerance=10)
    keypoints = make_keypoints(leg_at_angle(180))
    forward = analyze_pose(keypoints, PoseConfig([a, b]))
    backward = analyze_pose(keypoints, PoseConfig([b, a]))
    assert forward.accuracy == pytest.approx(backward.accuracy)
    assert forward.feedback == tuple(reversed(backward.feedback))


def test_empty_good_feedback_falls_back_to_analyzing():
    config_ = PoseConfig([knee_rule(good="")])
    result = analyze_pose(make_keypoints(leg_at_angle(180)), config_)
    assert result.feedback == (config.MSG_ANALYZING,)
    assert result.accuracy == pytest.approx(100.0)


def test_accepts_mapping_config():
    rules = {"left_knee": knee_rule()}
    result = analyze_pose(make_keypoints(leg_at_angle(180)), rules)
    assert result.accuracy == pytest.approx(100.0)


def test_accepts_plain_dict_rules():
    rules = {
        "left_knee": {
            "p1": 23, "p2": 25, "p3": 27, "target": 180, "tolerance": 10,
            "feedback_low": "low", "feedback_high": "high", "feedback_good": "good",
        }
    }
    result = analyze_pose(make_keypoints(leg_at_angle(140)), rules)
    assert result.feedback == ("low",)


# =============================================================================
# Malformed input
# =============================================================================

def test_out_of_range_index_is_treated_as_missing():
    rule = AngleRule(name="bad", p1=23, p2=25, p3=99, target=180, tolerance=10)
    result = analyze_pose(make_keypoints(leg_at_angle(180)), PoseConfig([rule]))
    assert result.feedback == (config.MSG_HOLD_POSE,)
    assert result.accuracy == 0


def test_negative_index_is_treated_as_missing():
    rule = AngleRule(name="bad", p1=-1, p2=25, p3=27, target=180, tolerance=10)
    result = analyze_pose(make_keypoints(leg_at_angle(180)), PoseConfig([rule]))
    assert result.feedback == (config.MSG_HOLD_POSE,)


def test_duplicate_rule_names_keep_the_first():
    first = knee_rule(good="first")
    second = knee_rule(target=90, tolerance=10)
    result = analyze_pose(make_keypoints(leg_at_angle(180)), [first, second])
    assert result.accuracy == pytest.approx(100.0)
    assert result.feedback == ("first",)


def test_non_rule_entries_are_ignored():
    keypoints = make_keypoints(leg_at_angle(180))
    result = analyze_pose(keypoints, {"x": "not a rule", "left_knee": knee_rule()})
    assert result.accuracy == pytest.approx(100.0)
    assert result.feedback == ("Left leg looks good.",)

    result = analyze_pose(keypoints, {"x": "not a rule"})
    assert result.feedback == (config.MSG_NOT_FRAMED,)

    result = analyze_pose(keypoints, [42, knee_rule()])
    assert result.accuracy == pytest.approx(100.0)


def test_non_iterable_config_is_treated_as_empty():
    result = analyze_pose(make_keypoints(leg_at_angle(180)), 7)
    assert result.feedback == (config.MSG_NOT_FRAMED,)
    assert result.accuracy == 0


def test_short_keypoint_set_does_not_raise(knee_config):
    keypoints = [Keypoint(0.0, 0.0, 0.9)] * 5
    result = analyze_pose(keypoints, knee_config)
    assert result.feedback == (config.MSG_HOLD_POSE,)


def test_none_entries_and_missing_scores_do_not_raise(knee_config):
    keypoints = make_keypoints(leg_at_angle(180))
    keypoints[0] = None
    keypoints[1] = Keypoint(0.0, 0.0, None)
    result = analyze_pose(keypoints, knee_config)
    assert result.accuracy == pytest.approx(100.0)


def test_nan_coordinates_skip_the_rule(knee_config):
    overrides = leg_at_angle(180)
    overrides[Landmark.LEFT_KNEE] = Keypoint(float('nan'), 200.0, 0.9)
    result = analyze_pose(make_keypoints(overrides), knee_config)
    assert result.feedback == (config.MSG_HOLD_POSE,)


def test_non_numeric_target_skips_the_rule():
    rule = AngleRule(name="bad", p1=23, p2=25, p3=27, target="straight", tolerance=10)
    result = analyze_pose(make_keypoints(leg_at_angle(180)), PoseConfig([rule]))
    assert result.feedback == (config.MSG_HOLD_POSE,)


def test_accuracy_always_in_range():
    keypoints = make_keypoints(leg_at_angle(100))
    for target in range(0, 181, 15):
        for tolerance in (0, 5, 30, 200):
            result = analyze_pose(keypoints, PoseConfig([knee_rule(target=target, tolerance=tolerance)]))
            assert 0.0 <= result.accuracy <= 100.0
            assert result.feedback


# =============================================================================
# Helpers
# =============================================================================

def test_mean_confidence():
    assert mean_confidence([]) == 0.0
    assert mean_confidence(None) == 0.0
    assert mean_confidence([Keypoint(0, 0, 0.2), None, Keypoint(0, 0, 0.7)]) == pytest.approx(0.3)


def test_evaluate_rule_reports_measurement():
    evaluation = evaluate_rule(make_keypoints(leg_at_angle(150)), knee_rule())
    assert evaluation.angle == pytest.approx(150.0)
    assert evaluation.deviation == pytest.approx(30.0)
    assert evaluation.score == pytest.approx(1 - 20 / 45)
    assert evaluation.feedback == "Straighten your left leg."
    assert math.isfinite(evaluation.score)
