"""
Track Store

Owns the id -> Track mapping: lazy creation on first observation, lookup,
and explicit removal. Tracks never expire on their own.

Each Track keeps a fixed local tangent origin (its first observed
position), the Kalman filter state, the last applied timestamp, the
aggressive-pruning deadline and the ordered sample history.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set, Tuple

from .kalman import KalmanState, LinearKalmanFilter
from .models import Estimate, Sample

logger = logging.getLogger(__name__)


@dataclass
class Track:
    """
    Filtered state of one externally identified object.

    Attributes:
        id: Caller-supplied track identifier
        origin: Local tangent origin (longitude, latitude), never changes
        filter_state: Kalman state [x, y, vx, vy] and 4x4 covariance
        last_timestamp_millis: Timestamp of the last applied observation
        aggressive_prune_until_millis: Deadline of fast-movement retention,
            None until first armed
        samples: Retained history, oldest first
    """

    id: str
    origin: Tuple[float, float]
    filter_state: KalmanState
    last_timestamp_millis: int
    aggressive_prune_until_millis: Optional[int] = None
    samples: Deque[Sample] = field(default_factory=deque)

    @property
    def latest_estimate(self) -> Optional[Estimate]:
        """Estimate of the newest retained sample."""
        return self.samples[-1].estimate if self.samples else None


def validate_track_id(track_id: str) -> str:
    """
    Raises:
        ValueError: If the id is not a non-blank string
    """
    if not isinstance(track_id, str) or not track_id.strip():
        raise ValueError(f"id must be a non-blank string, got {track_id!r}")
    return track_id


class TrackStore:
    """
    Arena of tracks keyed by id.

    Lookups and insertions are guarded by a lock so that distinct ids can be
    recorded from different threads. Updates to one id must still be
    serialized by the caller.

    Example:
        >>> store = TrackStore(LinearKalmanFilter())
        >>> track = store.get_or_create("asset-1", (13.0, 52.0), 0)
        >>> store.tracked_ids()
        {'asset-1'}
    """

    def __init__(self, kf: LinearKalmanFilter) -> None:
        """
        Args:
            kf: Filter used to seed the initial state of new tracks
        """
        self.kf = kf
        self._tracks: Dict[str, Track] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self, track_id: str, origin: Tuple[float, float], timestamp_millis: int
    ) -> Track:
        """
        Fetch a track, creating it on first sight.

        Args:
            track_id: Track identifier
            origin: Normalized first observed position, becomes the origin
            timestamp_millis: First observation timestamp

        Returns:
            Existing or newly created Track
        """
        validate_track_id(track_id)
        with self._lock:
            track = self._tracks.get(track_id)
            if track is None:
                track = Track(
                    id=track_id,
                    origin=origin,
                    filter_state=self.kf.initialize(),
                    last_timestamp_millis=timestamp_millis,
                )
                self._tracks[track_id] = track
                logger.info(f"Created track {track_id!r} at origin {origin}")
        return track

    def get(self, track_id: str) -> Optional[Track]:
        """Get track by ID, or None if unknown."""
        validate_track_id(track_id)
        with self._lock:
            return self._tracks.get(track_id)

    def remove(self, track_id: str) -> bool:
        """
        Remove all state for one id.

        Returns:
            True if a track was removed
        """
        validate_track_id(track_id)
        with self._lock:
            removed = self._tracks.pop(track_id, None) is not None
        if removed:
            logger.info(f"Removed track {track_id!r}")
        return removed

    def clear(self) -> None:
        """Remove all tracks."""
        with self._lock:
            count = len(self._tracks)
            self._tracks.clear()
        logger.info(f"Cleared {count} tracks")

    def tracked_ids(self) -> Set[str]:
        """Snapshot of currently tracked ids."""
        with self._lock:
            return set(self._tracks.keys())

    def estimate_for(self, track_id: str) -> Optional[Estimate]:
        """Most recent estimate for the id, or None if the id is unknown."""
        track = self.get(track_id)
        return track.latest_estimate if track else None

    def sample_count(self, track_id: str) -> int:
        """Number of retained samples for the id (0 if unknown)."""
        track = self.get(track_id)
        return len(track.samples) if track else 0

    def samples(self, track_id: str) -> List[Sample]:
        """Copy of the retained samples for the id, oldest first."""
        track = self.get(track_id)
        return list(track.samples) if track else []

    def __len__(self) -> int:
        with self._lock:
            return len(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        with self._lock:
            return track_id in self._tracks
