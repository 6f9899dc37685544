"""
Data models for pose scoring.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Tuple


class Keypoint(NamedTuple):
    """One detected landmark."""
    x: float      # Pixels
    y: float      # Pixels
    score: float  # Confidence [0, 1]


# One frame of detector output, indexed by Landmark. Entries may be None.
KeypointSet = Sequence[Optional[Keypoint]]


def keypoint_confidence(keypoint) -> float:
    """Confidence of a keypoint, 0.0 if missing or unreadable."""
    if keypoint is None:
        return 0.0
    score = getattr(keypoint, "score", None)
    if score is None:
        return 0.0
    try:
        score = float(score)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


def get_keypoint(keypoints: KeypointSet, index):
    """Keypoint at index, or None when the index is outside the set."""
    try:
        index = int(index)
    except (TypeError, ValueError):
        return None
    if index < 0 or index >= len(keypoints):
        return None
    return keypoints[index]


@dataclass(frozen=True)
class AngleRule:
    """
    Target angle at vertex p2 formed by landmarks p1-p2-p3.

    p1, p2, p3 are landmark indices; target and tolerance are degrees.
    """
    name: str
    p1: int
    p2: int
    p3: int
    target: float
    tolerance: float
    feedback_low: str = ""
    feedback_high: str = ""
    feedback_good: str = ""


def coerce_rule(name: str, value: Any) -> Optional[AngleRule]:
    """
    Turn an AngleRule or a plain dict of rule fields into an AngleRule
    named `name`. Returns None for anything else. Fields are not validated.
    """
    if isinstance(value, AngleRule):
        return value if value.name == name else replace(value, name=name)
    if isinstance(value, Mapping):
        return AngleRule(
            name=name,
            p1=value.get("p1"), p2=value.get("p2"), p3=value.get("p3"),
            target=value.get("target"), tolerance=value.get("tolerance"),
            feedback_low=value.get("feedback_low") or "",
            feedback_high=value.get("feedback_high") or "",
            feedback_good=value.get("feedback_good") or "",
        )
    return None


class PoseConfig:
    """
    Ordered collection of uniquely named angle rules.

    Iteration follows insertion order, which only decides the order of
    feedback messages, never the score.
    """

    def __init__(self, rules: Iterable[AngleRule] = ()):
        self._rules: List[AngleRule] = []
        for rule in rules:
            self.add(rule)

    @classmethod
    def from_mapping(cls, rules: Mapping[str, AngleRule]) -> "PoseConfig":
        """
        Build from a name -> rule mapping, keeping the mapping's order.

        Values may be AngleRules or plain dicts with the same fields.
        """
        config = cls()
        for name, value in rules.items():
            rule = coerce_rule(name, value)
            if rule is None:
                raise TypeError(f"Rule {name!r} is not an AngleRule or mapping")
            config.add(rule)
        return config

    def add(self, rule: AngleRule) -> None:
        if rule.name in self:
            raise ValueError(f"Duplicate rule name: {rule.name!r}")
        self._rules.append(rule)

    def get(self, name: str) -> Optional[AngleRule]:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def __contains__(self, name: object) -> bool:
        return any(rule.name == name for rule in self._rules)

    def __iter__(self) -> Iterator[AngleRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PoseConfig):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"PoseConfig({self.names()!r})"


class RuleEvaluation(NamedTuple):
    """How one rule scored on one frame."""
    name: str
    angle: float        # Measured angle (degrees)
    deviation: float    # |angle - target|
    score: float        # [0, 1]
    feedback: Optional[str]


class ScoreResult(NamedTuple):
    """Result of scoring one frame."""
    feedback: Tuple[str, ...]
    accuracy: float  # [0, 100]
    rule_results: Tuple[RuleEvaluation, ...] = ()


@dataclass
class PoseDefinition:
    """A named pose from the pose library."""
    pose_id: str
    display_name: str
    config: PoseConfig
    description: str = ""
    image_url: str = ""
    metadata: dict = field(default_factory=dict)
