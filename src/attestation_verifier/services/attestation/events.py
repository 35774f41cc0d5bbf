"""
Observability hooks for the verification pipeline.

The pipeline reports rejections, verifier degradation and issuance through
an AttestationEvents instance; the default one logs every event and keeps
counters for the health endpoint.
"""

import logging
import threading
from collections import defaultdict
from typing import Dict, Any

logger = logging.getLogger(__name__)


class AttestationEvents:
    """
    Logging and counting sink for pipeline events.

    Counters are guarded by their own lock and never feed back into a
    trust decision.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._metrics = self._empty_metrics()

    @staticmethod
    def _empty_metrics() -> Dict[str, Any]:
        return {
            "total_requests": 0,
            "rejected": 0,
            "failed": 0,
            "abandoned": 0,
            "issued": 0,
            "trusted": 0,
            "platform_timeouts": 0,
            "verifier_errors": 0,
            "rejection_breakdown": defaultdict(int),
            "platform_breakdown": defaultdict(int),
        }

    def request_received(self) -> None:
        with self._lock:
            self._metrics["total_requests"] += 1

    def request_rejected(self, reason: str) -> None:
        logger.info(f"Attestation request rejected - Reason: {reason}")
        with self._lock:
            self._metrics["rejected"] += 1
            self._metrics["rejection_breakdown"][reason] += 1

    def request_failed(self, message: str) -> None:
        logger.error(f"Attestation request failed - {message}")
        with self._lock:
            self._metrics["failed"] += 1

    def request_abandoned(self) -> None:
        logger.info("Client disconnected before verification completed; evaluation abandoned")
        with self._lock:
            self._metrics["abandoned"] += 1

    def platform_timeout(self, platform: str, verifier: str, timeout: float) -> None:
        logger.warning(f"platform_timeout - Platform: {platform}, "
                       f"Verifier: {verifier}, Timeout: {timeout}s; scoring 0.0")
        with self._lock:
            self._metrics["platform_timeouts"] += 1

    def verifier_error(self, platform: str, verifier: str, error: BaseException) -> None:
        logger.error(f"Verifier error - Platform: {platform}, Verifier: {verifier}, "
                     f"Error: {error!r}; scoring 0.0", exc_info=error)
        with self._lock:
            self._metrics["verifier_errors"] += 1

    def session_issued(self, platform: str, trust_score: float, trusted: bool, nullifier: str) -> None:
        logger.info(f"Session issued - Platform: {platform}, Trust score: {trust_score}, "
                    f"Trusted: {trusted}, Nullifier: {nullifier[:8]}...")
        with self._lock:
            self._metrics["issued"] += 1
            if trusted:
                self._metrics["trusted"] += 1
            self._metrics["platform_breakdown"][platform] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get current metrics.

        Returns:
            Dictionary with current counters
        """
        with self._lock:
            snapshot = dict(self._metrics)
            snapshot["rejection_breakdown"] = dict(self._metrics["rejection_breakdown"])
            snapshot["platform_breakdown"] = dict(self._metrics["platform_breakdown"])
        return snapshot

    def reset_metrics(self) -> None:
        with self._lock:
            self._metrics = self._empty_metrics()
        logger.info("Attestation metrics reset")
