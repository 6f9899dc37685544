"""
Yoga Pose Scorer - Score one frame of keypoints
================================================

Steps:
1. Load Pose Library - Pose definitions and angle rules (YAML)
2. Load Keypoints - One frame of detector output (JSON)
3. Score - Accuracy + corrective feedback
4. Render (optional) - Skeleton, keypoints and score overlay on an image

Keypoints file: a JSON list of {"x", "y", "score"} objects (or null) in
BlazePose landmark order, or an object with a "keypoints" list.

Usage:
    python main.py --keypoints frame.json --pose tree_pose
    python main.py --keypoints frame.json --pose tree_pose --image frame.jpg --output result.jpg
    python main.py --list
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import cv2
import numpy as np

# Import configuration
import config

from pose_scoring import Keypoint, PoseConfigError, PoseLibrary, ScoreResult, analyze_pose
from utils.visualization import draw_keypoints, draw_rule_angles, draw_score_overlay, draw_skeleton


def load_keypoints(path: str) -> List[Optional[Keypoint]]:
    """Read one frame of keypoints from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('keypoints', [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of keypoints")

    keypoints = []
    for i, item in enumerate(data):
        if item is None:
            keypoints.append(None)
            continue
        if isinstance(item, dict):
            keypoints.append(Keypoint(
                x=float(item['x']),
                y=float(item['y']),
                score=float(item.get('score', 0.0))
            ))
        elif isinstance(item, (list, tuple)) and len(item) >= 3:
            keypoints.append(Keypoint(float(item[0]), float(item[1]), float(item[2])))
        else:
            raise ValueError(f"{path}: keypoint {i} is not an object or [x, y, score] triple")
    return keypoints


class YogaPoseScorer:
    """Scores keypoint frames against a pose from the library."""

    def __init__(self, library_path: str = None, min_confidence: float = None):
        """
        Args:
            library_path: Path to pose library YAML (default from config)
            min_confidence: Drawing confidence threshold (default from config)
        """
        library_path = library_path or config.POSE_LIBRARY_PATH
        self.min_confidence = (
            config.MIN_DRAW_CONFIDENCE if min_confidence is None else min_confidence
        )
        self.library = PoseLibrary.load(library_path)

    def process_frame(
        self,
        keypoints: List[Optional[Keypoint]],
        pose_id: str,
        frame: Optional[np.ndarray] = None,
        scale: float = 1.0
    ) -> Dict[str, Any]:
        """
        Score keypoints and optionally render them.

        Returns:
            dict with: pose_name, result, annotated_frame (None without frame)
        """
        pose = self.library.get(pose_id)
        if pose is None:
            raise KeyError(pose_id)

        result = analyze_pose(keypoints, pose.config)

        annotated = None
        if frame is not None:
            annotated = frame.copy()
            draw_skeleton(keypoints, self.min_confidence, annotated, scale)
            draw_keypoints(keypoints, self.min_confidence, annotated, scale)
            annotated = draw_rule_angles(annotated, keypoints, pose.config, result, scale)
            annotated = draw_score_overlay(annotated, pose.display_name, result)

        return {
            'pose_name': pose.display_name,
            'result': result,
            'annotated_frame': annotated
        }


def format_result(pose_name: str, result: ScoreResult) -> str:
    lines = [f"{pose_name}: {result.accuracy:.1f}%"]
    for message in result.feedback:
        lines.append(f"  - {message}")
    for evaluation in result.rule_results:
        lines.append(
            f"    {evaluation.name}: {evaluation.angle:.1f} deg "
            f"(off by {evaluation.deviation:.1f}, score {evaluation.score:.2f})"
        )
    return "\n".join(lines)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Yoga Pose Scorer - Score keypoints against pose rules',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument('--library', type=str, default=config.POSE_LIBRARY_PATH,
                        help='Path to pose library YAML')
    parser.add_argument('--list', action='store_true',
                        help='List poses in the library and exit')

    # Input
    parser.add_argument('--keypoints', type=str, help='Path to keypoints JSON file')
    parser.add_argument('--pose', type=str, help='Pose id to score against')

    # Rendering
    parser.add_argument('--image', type=str, help='Image to draw the skeleton on')
    parser.add_argument('--output', type=str, default='output_result.jpg',
                        help='Where to save the rendered image')
    parser.add_argument('--min-confidence', type=float, default=config.MIN_DRAW_CONFIDENCE,
                        help='Minimum keypoint confidence for drawing')
    parser.add_argument('--scale', type=float, default=1.0,
                        help='Scale applied to keypoint coordinates when drawing')

    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        scorer = YogaPoseScorer(library_path=args.library, min_confidence=args.min_confidence)
    except (OSError, PoseConfigError) as e:
        print(f"ERROR: Failed to load pose library: {e}", file=sys.stderr)
        return 1

    if args.list:
        for pose in scorer.library:
            print(f"{pose.pose_id:<20} {pose.display_name} ({len(pose.config)} rules)")
        return 0

    if not args.keypoints or not args.pose:
        print("ERROR: --keypoints and --pose are required", file=sys.stderr)
        return 1

    if args.pose not in scorer.library:
        print(f"ERROR: Unknown pose '{args.pose}'. "
              f"Available: {', '.join(scorer.library.pose_ids())}", file=sys.stderr)
        return 1

    try:
        keypoints = load_keypoints(args.keypoints)
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"ERROR: Failed to read keypoints: {e}", file=sys.stderr)
        return 1

    frame = None
    if args.image:
        frame = cv2.imread(args.image)
        if frame is None:
            print(f"ERROR: Cannot read image: {args.image}", file=sys.stderr)
            return 1

    output = scorer.process_frame(keypoints, args.pose, frame=frame, scale=args.scale)
    print(format_result(output['pose_name'], output['result']))

    if output['annotated_frame'] is not None:
        output_path = Path(args.output)
        cv2.imwrite(str(output_path), output['annotated_frame'])
        print(f"Saved result to: {output_path}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
