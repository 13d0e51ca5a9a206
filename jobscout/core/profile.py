"""
User profile defaults and scoring weight validation.
"""

from typing import Dict, Optional

from jobscout.core.schemas import ScoringWeights, UserProfile
from jobscout.core.utils import Clock, iso_timestamp

# Weights used by the matching agent unless the user overrides them
DEFAULT_SCORING_WEIGHTS: Dict[str, int] = {
    "salary_match": 30,
    "location_fit": 20,
    "company_appeal": 25,
    "role_match": 15,
    "requirements_fit": 10,
}

WEIGHTS_TOTAL = 100


def create_default_profile(clock: Optional[Clock] = None) -> UserProfile:
    """Blank profile with the default scoring weights."""
    return UserProfile(
        scoring_weights=ScoringWeights(**DEFAULT_SCORING_WEIGHTS),
        updated_at=iso_timestamp(clock),
    )


def validate_scoring_weights(weights) -> bool:
    """Check the five category weights sum to exactly 100.

    Accepts a ScoringWeights model or a plain dict with the same keys.
    """
    if isinstance(weights, ScoringWeights):
        weights = weights.dict()

    return sum(weights.get(name, 0) for name in DEFAULT_SCORING_WEIGHTS) == WEIGHTS_TOTAL
