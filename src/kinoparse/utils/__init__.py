"""
Utilities Package.

Provides anti-automation challenge detection.
"""

from .challenge_handler import (
    CAPTCHA_MARKER,
    ChallengeEvent,
    detect_challenge,
    is_challenge_location,
)

__all__ = [
    "CAPTCHA_MARKER",
    "ChallengeEvent",
    "detect_challenge",
    "is_challenge_location",
]
