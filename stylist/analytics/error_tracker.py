"""Error tracking and alerting for degraded conversation turns."""
from collections import Counter
from typing import Any, Callable, Dict, List, Optional
import time

from stylist.analytics.logger import logger

# Alert once this many errors of a type land inside ALERT_WINDOW_SECONDS
ALERT_THRESHOLDS: Dict[str, int] = {
    "data_unavailable": 3,
    "mutation_failed": 3,
    "malformed_handoff": 5,
    "server_error": 2,
}
ALERT_WINDOW_SECONDS = 60
HISTORY_SECONDS = 3600


class ErrorTracker:
    """Rolling history of recorded errors with per-type threshold alerts."""

    def __init__(
        self,
        thresholds: Optional[Dict[str, int]] = None,
        time_source: Callable[[], float] = time.time,
    ):
        self.thresholds = dict(ALERT_THRESHOLDS if thresholds is None else thresholds)
        self.time_source = time_source
        self.totals: Counter = Counter()
        self.history: List[Dict[str, Any]] = []
        self.alerts: List[Dict[str, Any]] = []

    def record_error(
        self,
        error_type: str,
        error_message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        now = self.time_source()
        self.history.append(
            {
                "timestamp": now,
                "type": error_type,
                "message": error_message,
                "context": context or {},
            }
        )
        self.totals[error_type] += 1
        self.history = [e for e in self.history if e["timestamp"] > now - HISTORY_SECONDS]

        logger.error(f"{error_type}: {error_message}", extra={"error_type": error_type})
        self._check_threshold(error_type, now)

    def _since(self, cutoff: float, error_type: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            e for e in self.history
            if e["timestamp"] > cutoff and (error_type is None or e["type"] == error_type)
        ]

    def _check_threshold(self, error_type: str, now: float):
        threshold = self.thresholds.get(error_type)
        if not threshold:
            return

        count = len(self._since(now - ALERT_WINDOW_SECONDS, error_type))
        if count >= threshold:
            alert = {
                "timestamp": now,
                "type": error_type,
                "count": count,
                "threshold": threshold,
            }
            self.alerts.append(alert)
            logger.warning(
                f"ALERT: {error_type} hit {count} errors in {ALERT_WINDOW_SECONDS}s "
                f"(threshold {threshold})",
                extra=alert,
            )

    def get_error_stats(self, window_seconds: int = 300) -> Dict[str, Any]:
        """Error counts per type inside the window, plus errors per minute."""
        recent = self._since(self.time_source() - window_seconds)
        per_minute = len(recent) / (window_seconds / 60) if window_seconds > 0 else 0
        return {
            "window_seconds": window_seconds,
            "total_errors": len(recent),
            "error_types": dict(Counter(e["type"] for e in recent)),
            "error_rate": per_minute,
            "alerts": len([a for a in self.alerts if a["timestamp"] > self.time_source() - window_seconds]),
        }

    def get_recent_errors(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Newest first."""
        return list(reversed(self.history))[:limit]

    def reset(self):
        self.totals.clear()
        self.history = []
        self.alerts = []


# Global error tracker instance
error_tracker = ErrorTracker()
