"""
Infrastructure Package.

Provides the delayed navigation scheduler used to stay under the site's
anti-automation threshold.
"""

from .scheduler import (
    NavigationScheduler,
    RateLimitConfig,
    SchedulerMetrics,
)

__all__ = [
    "NavigationScheduler",
    "RateLimitConfig",
    "SchedulerMetrics",
]
