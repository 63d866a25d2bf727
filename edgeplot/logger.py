"""
Logging for routing and editing

Records expected degradations (such as replacing a tangled route with the
minimal one) as notices, without treating them as faults
"""
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class RoutingNotice:
    """Something the engine did on the user's behalf"""
    edge_id: Optional[str]
    notice_type: str  # 'minimal_route_fallback', 'materialized_defaults', 'ignored_event', etc.
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class RoutingLogger:
    """Logger for routing and waypoint editing"""

    def __init__(self, keep_notices: bool = True):
        """
        Args:
            keep_notices: Whether to keep notices in memory for inspection
        """
        self.keep_notices = keep_notices
        self.notices: List[RoutingNotice] = []
        self.logger = logging.getLogger('edgeplot')

        # Library default: stay silent unless the host configures handlers
        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    def _record(self, notice: RoutingNotice):
        if self.keep_notices:
            self.notices.append(notice)
        self.logger.debug(f"[{notice.edge_id}] {notice.message}")

    def note_fallback(self, edge_id: Optional[str], original_count: int, reason: str):
        """Record that a simplified route was replaced by the minimal route"""
        self._record(RoutingNotice(
            edge_id=edge_id,
            notice_type='minimal_route_fallback',
            message=f"Route replaced by minimal route ({reason}, {original_count} points)",
            details={'original_count': original_count, 'reason': reason},
        ))

    def note_materialized(self, edge_id: Optional[str], corners: list):
        """Record that implicit default corners became explicit waypoints"""
        self._record(RoutingNotice(
            edge_id=edge_id,
            notice_type='materialized_defaults',
            message=f"Default corners materialized: {corners}",
            details={'corners': list(corners)},
        ))

    def note_ignored(self, edge_id: Optional[str], event: str, state: str):
        """Record an input event that had no transition in the current state"""
        self._record(RoutingNotice(
            edge_id=edge_id,
            notice_type='ignored_event',
            message=f"Ignored {event} in state {state}",
            details={'event': event, 'state': state},
        ))

    def debug(self, message: str):
        """Debug log"""
        self.logger.debug(message)

    def get_notices(self) -> List[RoutingNotice]:
        """Get notice list"""
        return self.notices

    def clear_notices(self):
        """Clear notice list"""
        self.notices.clear()


# Global logger instance
_default_logger = RoutingLogger()


def get_logger() -> RoutingLogger:
    """Get default logger"""
    return _default_logger
