"""
Thresholds for column detection and mapping review.

Scores are similarity ratios in the range 0.0-1.0 (1.0 = identical after
header normalization).
"""

# Minimum similarity for a fuzzy header match to be accepted at all.
MATCH_THRESHOLD: float = 0.6

# Fuzzy matches scoring below this are listed for operator review.
# Exact matches are never reported, whatever their score.
LOW_CONFIDENCE_THRESHOLD: float = 0.8

# Confidence assigned to exact alias matches and operator overrides.
EXACT_CONFIDENCE: float = 1.0
