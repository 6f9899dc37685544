"""
Yoga Pose Scoring Configuration
===============================

Central configuration file for scoring and rendering parameters.
"""

# =============================================================================
# Scoring Settings
# =============================================================================
FRAMING_CONFIDENCE = 0.3    # Mean keypoint confidence required to score at all
RULE_CONFIDENCE = 0.3       # Per-keypoint confidence required to evaluate a rule
MAX_DEVIATION_WINDOW = 45.0  # Degrees past tolerance where a rule's score hits 0

# Fallback feedback messages
MSG_NOT_FRAMED = "Please position yourself clearly in the frame."
MSG_HOLD_POSE = "Hold the pose..."
MSG_ANALYZING = "Analyzing..."

# =============================================================================
# Pose Library Settings
# =============================================================================
POSE_LIBRARY_PATH = "data/pose_library.yaml"
NUM_LANDMARKS = 33  # BlazePose / MediaPipe Pose

# =============================================================================
# Display Settings
# =============================================================================
MIN_DRAW_CONFIDENCE = 0.3
LINE_WIDTH = 3
KEYPOINT_RADIUS = 4
FONT_SCALE = 0.7

# Colors (BGR format)
COLOR_SKELETON = (255, 191, 0)    # Deep sky blue
COLOR_KEYPOINT = (238, 104, 123)  # Medium slate blue
COLOR_GREEN = (0, 255, 0)
COLOR_ORANGE = (0, 165, 255)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
