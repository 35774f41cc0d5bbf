"""
Platform verifier registry.

Dispatches a validated request to the verifier registered for its platform
and turns the outcome into a TrustDecision. Verifier failures and timeouts
are absorbed into a 0.0 score; they never reach the caller as exceptions.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Dict, Any

from .base import PlatformVerifier, Platform, TrustDecision
from .config import AttestationConfig
from .events import AttestationEvents
from .ios_appattest import AppAttestVerifier
from .android_playintegrity import PlayIntegrityVerifier
from .web import SentinelVerifier, WebTokenVerifier

logger = logging.getLogger(__name__)


class VerifierUnavailableError(Exception):
    """No verifier is registered for the requested platform."""

    def __init__(self, platform: Platform):
        super().__init__(f"No verifier registered for platform: {platform.value}")
        self.platform = platform


class PlatformVerifierRegistry:
    """
    Platform-keyed set of verifiers.

    Each evaluation runs its verifier in a worker thread so slow vendor
    calls never block other requests, bounded by a timeout. Every platform
    gets its own bounded pool: calls abandoned on timeout keep their thread
    until they return, and only that platform's capacity is spent on them.
    """

    def __init__(self, config: AttestationConfig, events: Optional[AttestationEvents] = None):
        self.config = config
        self.events = events or AttestationEvents()
        self._verifiers: Dict[Platform, PlatformVerifier] = {}
        self._executors: Dict[Platform, ThreadPoolExecutor] = {}

    @classmethod
    def from_config(cls, config: AttestationConfig,
                    events: Optional[AttestationEvents] = None) -> "PlatformVerifierRegistry":
        """Build the default registry: stub verifiers in stub mode, vendor verifiers otherwise."""
        registry = cls(config, events)
        registry.register(AppAttestVerifier(config))
        registry.register(PlayIntegrityVerifier(config))
        if config.stub_mode:
            registry.register(SentinelVerifier(config))
        else:
            registry.register(WebTokenVerifier(config))
        return registry

    def register(self, verifier: PlatformVerifier) -> None:
        """Register a verifier, replacing any existing one for its platform."""
        platform = verifier.get_platform()
        if platform in self._verifiers:
            logger.info(f"Replacing {platform.value} verifier "
                        f"{self._verifiers[platform].get_verifier_type()} with {verifier.get_verifier_type()}")
        self._verifiers[platform] = verifier
        if platform not in self._executors:
            self._executors[platform] = ThreadPoolExecutor(
                max_workers=self.config.verifier_workers,
                thread_name_prefix=f"verifier-{platform.value}",
            )

    def get(self, platform: Platform) -> PlatformVerifier:
        verifier = self._verifiers.get(platform)
        if verifier is None:
            raise VerifierUnavailableError(platform)
        return verifier

    async def evaluate(self, platform: Platform, integrity_token: str, device_key: str,
                       nonce: str, timeout: Optional[float] = None) -> TrustDecision:
        """
        Evaluate a request with the platform's verifier.

        Args:
            platform: Resolved request platform
            integrity_token: Platform attestation blob
            device_key: Device public key identifier
            nonce: Request freshness token
            timeout: Seconds before the evaluation is abandoned
                (defaults to config.verifier_timeout)

        Returns:
            TrustDecision; score 0.0 on timeout or verifier failure

        Raises:
            VerifierUnavailableError: no verifier registered for platform
        """
        verifier = self.get(platform)
        verifier_type = verifier.get_verifier_type()
        timeout = self.config.verifier_timeout if timeout is None else timeout
        threshold = self.config.trust_threshold
        loop = asyncio.get_running_loop()

        try:
            verdict = await asyncio.wait_for(
                loop.run_in_executor(self._executors[platform], verifier.verify,
                                     integrity_token, device_key, nonce),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.events.platform_timeout(platform.value, verifier_type, timeout)
            return TrustDecision.from_score(
                0.0, threshold,
                platform=platform.value,
                verifier=verifier_type,
                timed_out=True,
                metadata={"condition": "platform_timeout"},
            )
        except Exception as e:
            self.events.verifier_error(platform.value, verifier_type, e)
            return TrustDecision.from_score(
                0.0, threshold,
                platform=platform.value,
                verifier=verifier_type,
                error=type(e).__name__,
            )

        return TrustDecision.from_score(
            verdict.score, threshold,
            platform=platform.value,
            verifier=verifier_type,
            metadata={"reason": verdict.reason, **verdict.metadata},
        )

    def get_verifier_status(self) -> Dict[str, Dict[str, Any]]:
        """
        Get status of all registered verifiers.

        Returns:
            Dictionary keyed by platform with verifier status information
        """
        return {
            platform.value: verifier.get_configuration_status()
            for platform, verifier in self._verifiers.items()
        }

    def is_healthy(self) -> bool:
        healthy = True
        for platform in Platform:
            verifier = self._verifiers.get(platform)
            if verifier is None:
                logger.warning(f"No verifier registered for {platform.value}")
                healthy = False
            elif not verifier.is_configured():
                logger.warning(f"Verifier {verifier.get_verifier_type()} not configured")
                healthy = False
        return healthy

    def shutdown(self) -> None:
        """Release worker pools without waiting for abandoned verifier calls."""
        for platform, executor in self._executors.items():
            logger.debug(f"Shutting down {platform.value} verifier pool")
            executor.shutdown(wait=False, cancel_futures=True)
        self._executors.clear()
