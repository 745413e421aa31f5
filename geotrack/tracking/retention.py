"""
Motion-Adaptive Sample Retention

Bounds per-track memory by pruning sample history from the front.

Window selection:
    - movement = distance(oldest retained estimate, newest estimate)
    - movement >= substantial_movement_meters or speed >= high_speed_threshold
      (re)arms a deadline now + fast_movement_window_millis
    - while now <= deadline the window is fast_movement_window_millis,
      otherwise time_window_millis

Fast or rapidly displacing tracks forget stale context sooner. The newest
sample is always kept, however old.
"""

import logging

from ..geo.geometry import distance
from .config import TrackerConfig
from .store import Track

logger = logging.getLogger(__name__)


class RetentionManager:
    """
    Prunes a track's history after each recorded sample.

    Example:
        >>> retention = RetentionManager(TrackerConfig())
        >>> retention.apply(track, now_millis=30_000)
    """

    def __init__(self, config: TrackerConfig) -> None:
        self.config = config

    def should_arm(self, track: Track) -> bool:
        """Whether the current history calls for aggressive pruning."""
        if not track.samples:
            return False
        oldest = track.samples[0].estimate
        newest = track.samples[-1].estimate

        movement = distance(oldest.position, newest.position)
        high_movement = movement >= self.config.substantial_movement_meters
        high_speed = newest.speed_mps >= self.config.high_speed_threshold_mps
        return high_movement or high_speed

    def window_millis(self, track: Track, now_millis: int) -> int:
        """Retention window currently in force for the track."""
        deadline = track.aggressive_prune_until_millis
        if deadline is not None and now_millis <= deadline:
            return self.config.fast_movement_window_millis
        return self.config.time_window_millis

    def apply(self, track: Track, now_millis: int, allow_arming: bool = True) -> int:
        """
        Re-arm the fast window if warranted, then prune from the front.

        Args:
            track: Track whose newest sample was just appended
            now_millis: Timestamp of the newest sample
            allow_arming: False to skip (re)arming for this sample

        Returns:
            Number of samples dropped
        """
        if allow_arming and self.should_arm(track):
            track.aggressive_prune_until_millis = now_millis + self.config.fast_movement_window_millis
            logger.debug(
                f"Track {track.id!r}: fast retention armed until "
                f"{track.aggressive_prune_until_millis}"
            )

        min_timestamp = now_millis - self.window_millis(track, now_millis)
        dropped = 0
        while len(track.samples) > 1 and track.samples[0].timestamp_millis < min_timestamp:
            track.samples.popleft()
            dropped += 1
        return dropped
