"""
Yoga Pose Scoring

Scores 2D body keypoints against declarative joint-angle rules:
1. Landmarks - BlazePose landmark schema and skeleton connections
2. Analyzer - Per-frame accuracy and corrective feedback
3. Pose Library - Pose definitions loaded from YAML
"""

from .landmarks import Landmark, POSE_CONNECTIONS, landmark_from_name, resolve_landmark
from .models import AngleRule, Keypoint, PoseConfig, PoseDefinition, RuleEvaluation, ScoreResult
from .analyzer import analyze_pose, evaluate_rule, mean_confidence
from .pose_library import (
    PoseConfigError,
    PoseLibrary,
    build_pose_config,
    load_pose_library,
    pose_id_from_name,
)

__version__ = "0.1.0"

__all__ = [
    'Landmark',
    'POSE_CONNECTIONS',
    'landmark_from_name',
    'resolve_landmark',
    'AngleRule',
    'Keypoint',
    'PoseConfig',
    'PoseDefinition',
    'RuleEvaluation',
    'ScoreResult',
    'analyze_pose',
    'evaluate_rule',
    'mean_confidence',
    'PoseConfigError',
    'PoseLibrary',
    'build_pose_config',
    'load_pose_library',
    'pose_id_from_name',
]
