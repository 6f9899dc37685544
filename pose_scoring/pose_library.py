"""
Pose Library
Loads pose definitions and their angle rules from a YAML file.

File format:

    poses:
      tree_pose:
        display_name: Tree Pose
        description: ...
        image_url: ...
        rules:
          standing_knee:
            p1: left_hip        # landmark name or index
            p2: left_knee       # vertex
            p3: left_ankle
            target: 180
            tolerance: 10
            feedback_low: Straighten your standing leg.
            feedback_high: ...
            feedback_good: Standing leg is nice and straight.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import yaml

import config

from .landmarks import Landmark, resolve_landmark
from .models import AngleRule, PoseConfig, PoseDefinition

logger = logging.getLogger(__name__)


class PoseConfigError(ValueError):
    """Raised when a pose or one of its rules is invalid."""


def pose_id_from_name(name: str) -> str:
    """'Warrior II' -> 'warrior_ii'"""
    return re.sub(r"\s+", "_", name.strip()).lower()


def _to_float(value: Any, field_name: str, rule_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise PoseConfigError(
            f"Rule {rule_name!r}: {field_name} must be a number, got {value!r}"
        ) from None


def build_rule(
    name: str,
    raw: Mapping[str, Any],
    num_landmarks: int = config.NUM_LANDMARKS
) -> AngleRule:
    """
    Validate one authored rule and convert it into an AngleRule.

    Landmark references may be names ("left_knee") or indices.
    """
    if not isinstance(raw, Mapping):
        raise PoseConfigError(f"Rule {name!r} must be a mapping, got {type(raw).__name__}")

    indices = []
    for key in ("p1", "p2", "p3"):
        if key not in raw:
            raise PoseConfigError(f"Rule {name!r}: missing {key}")
        index = resolve_landmark(raw[key])
        if index is None:
            raise PoseConfigError(f"Rule {name!r}: unknown landmark {raw[key]!r} for {key}")
        if not 0 <= index < num_landmarks:
            raise PoseConfigError(
                f"Rule {name!r}: {key}={index} is outside 0..{num_landmarks - 1}"
            )
        indices.append(index)

    target = _to_float(raw.get("target"), "target", name)
    tolerance = _to_float(raw.get("tolerance"), "tolerance", name)
    if not 0.0 <= target <= 180.0:
        raise PoseConfigError(f"Rule {name!r}: target {target} is outside 0..180")
    if tolerance < 0.0:
        raise PoseConfigError(f"Rule {name!r}: tolerance must be >= 0, got {tolerance}")

    return AngleRule(
        name=name,
        p1=indices[0],
        p2=indices[1],
        p3=indices[2],
        target=target,
        tolerance=tolerance,
        feedback_low=str(raw.get("feedback_low") or ""),
        feedback_high=str(raw.get("feedback_high") or ""),
        feedback_good=str(raw.get("feedback_good") or "")
    )


def build_pose_config(
    raw_rules: Optional[Mapping[str, Mapping[str, Any]]],
    num_landmarks: int = config.NUM_LANDMARKS
) -> PoseConfig:
    """Build a PoseConfig from a name -> authored rule mapping."""
    pose_config = PoseConfig()
    if not raw_rules:
        return pose_config
    if not isinstance(raw_rules, Mapping):
        raise PoseConfigError("Rules must be a mapping of rule name -> rule")

    for name, raw in raw_rules.items():
        pose_config.add(build_rule(str(name), raw, num_landmarks))
    return pose_config


def _landmark_name(index: int) -> Union[str, int]:
    try:
        return Landmark(index).name.lower()
    except ValueError:
        return index


def rule_to_dict(rule: AngleRule) -> Dict[str, Any]:
    """Inverse of build_rule, using landmark names where possible."""
    return {
        'p1': _landmark_name(rule.p1),
        'p2': _landmark_name(rule.p2),
        'p3': _landmark_name(rule.p3),
        'target': rule.target,
        'tolerance': rule.tolerance,
        'feedback_low': rule.feedback_low,
        'feedback_high': rule.feedback_high,
        'feedback_good': rule.feedback_good,
    }


class PoseLibrary:
    """Collection of pose definitions keyed by pose id."""

    def __init__(self, num_landmarks: int = config.NUM_LANDMARKS):
        self.num_landmarks = num_landmarks
        self.poses: Dict[str, PoseDefinition] = {}

    @classmethod
    def load(cls, path: Union[str, Path], num_landmarks: int = config.NUM_LANDMARKS) -> "PoseLibrary":
        """Load pose library from YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        library = cls(num_landmarks=num_landmarks)
        library.load_dict(data)
        logger.info("Loaded %d poses from %s", len(library), path)
        return library

    def load_dict(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise PoseConfigError("Pose library must be a mapping with a 'poses' key")
        poses = data.get('poses') or {}
        if not isinstance(poses, Mapping):
            raise PoseConfigError("'poses' must be a mapping of pose id -> pose")

        for pose_id, pose_data in poses.items():
            pose_data = pose_data or {}
            if not isinstance(pose_data, Mapping):
                raise PoseConfigError(f"Pose {pose_id!r} must be a mapping")
            try:
                pose_config = build_pose_config(pose_data.get('rules'), self.num_landmarks)
            except ValueError as e:
                raise PoseConfigError(f"Pose {pose_id!r}: {e}") from e

            self.poses[str(pose_id)] = PoseDefinition(
                pose_id=str(pose_id),
                display_name=pose_data.get('display_name', str(pose_id)),
                config=pose_config,
                description=pose_data.get('description', ''),
                image_url=pose_data.get('image_url', ''),
                metadata={
                    k: v for k, v in pose_data.items()
                    if k not in ('display_name', 'description', 'image_url', 'rules')
                }
            )

    def add_pose(
        self,
        display_name: str,
        description: str,
        image_url: str,
        rules: Mapping[str, Mapping[str, Any]]
    ) -> PoseDefinition:
        """
        Add a pose from authored rules (e.g. written by hand or generated).

        Existing poses with the same id are replaced.
        """
        if not display_name or not display_name.strip():
            raise PoseConfigError("Pose name must not be empty")
        pose_id = pose_id_from_name(display_name)
        try:
            pose_config = build_pose_config(rules, self.num_landmarks)
        except ValueError as e:
            raise PoseConfigError(f"Pose {pose_id!r}: {e}") from e

        if pose_id in self.poses:
            logger.warning("Replacing existing pose %r", pose_id)

        pose = PoseDefinition(
            pose_id=pose_id,
            display_name=display_name.strip(),
            config=pose_config,
            description=description,
            image_url=image_url
        )
        self.poses[pose_id] = pose
        return pose

    def get(self, pose_id: str) -> Optional[PoseDefinition]:
        return self.poses.get(pose_id)

    def pose_ids(self) -> List[str]:
        return list(self.poses)

    def to_dict(self) -> Dict[str, Any]:
        poses = {}
        for pose_id, pose in self.poses.items():
            entry = dict(pose.metadata)
            entry.update({
                'display_name': pose.display_name,
                'description': pose.description,
                'image_url': pose.image_url,
                'rules': {rule.name: rule_to_dict(rule) for rule in pose.config},
            })
            poses[pose_id] = entry
        return {'poses': poses}

    def save(self, path: Union[str, Path]) -> None:
        """Write the library back to YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)
        logger.info("Saved %d poses to %s", len(self), path)

    def __contains__(self, pose_id: object) -> bool:
        return pose_id in self.poses

    def __iter__(self) -> Iterator[PoseDefinition]:
        return iter(self.poses.values())

    def __len__(self) -> int:
        return len(self.poses)


def load_pose_library(path: Union[str, Path] = config.POSE_LIBRARY_PATH) -> PoseLibrary:
    """Load the pose library (default path from config)."""
    return PoseLibrary.load(path)
