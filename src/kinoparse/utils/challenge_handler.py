"""
Anti-automation challenge detection.

kinopoisk answers suspicious traffic by redirecting to a Yandex
"showcaptcha" page. The scraper never tries to solve it: a detected
challenge abandons the current record and the batch moves on.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


# Substring of the resolved location that marks a challenge page
CAPTCHA_MARKER = "showcaptcha"


@dataclass
class ChallengeEvent:
    """A challenge met while processing one record."""
    location: str
    record: str
    stage: str
    detected_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "location": self.location,
            "record": self.record,
            "stage": self.stage,
            "detected_at": self.detected_at.isoformat(),
        }


def detect_challenge(location: Optional[str], marker: str = CAPTCHA_MARKER) -> Optional[str]:
    """
    Detect a challenge from the post-navigation location.

    Args:
        location: Final (possibly redirected) URL of the navigation
        marker: Substring that identifies the challenge page

    Returns:
        Name of the detected challenge, or None if the page is clean
    """
    if location and marker in location:
        return f"url_pattern:{marker}"
    return None


def is_challenge_location(location: Optional[str], marker: str = CAPTCHA_MARKER) -> bool:
    """Check if a resolved location is a challenge page."""
    return detect_challenge(location, marker) is not None
