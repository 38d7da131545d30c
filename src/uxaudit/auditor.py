"""Audit runner - model call with bounded retry and quota fallback."""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from uxaudit.config import RetryPolicy, ScoringThresholds
from uxaudit.exceptions import (
    AuditFailedError,
    ModelCallError,
    ModelQuotaExceededError,
    ModelRetryableError,
)
from uxaudit.fallback import FallbackReviewGenerator
from uxaudit.llm import LLMClient
from uxaudit.logging_config import format_event
from uxaudit.models import Review
from uxaudit.sanitizer import parse_model_json, sanitize_review

logger = logging.getLogger(__name__)


class AuditRunner:
    """Runs the model audit and turns its answer into a sanitized Review.

    Transient failures are retried with exponential backoff. Quota
    exhaustion is never retried: the deterministic fallback review is
    returned straight away (when fallback is allowed).
    """

    def __init__(
        self,
        llm: LLMClient,
        retry_policy: Optional[RetryPolicy] = None,
        allow_fallback: bool = True,
        thresholds: Optional[ScoringThresholds] = None,
        fallback: Optional[FallbackReviewGenerator] = None,
    ):
        self.llm = llm
        self.retry_policy = retry_policy or RetryPolicy()
        self.allow_fallback = allow_fallback
        self.thresholds = thresholds or ScoringThresholds()
        self.fallback = fallback or FallbackReviewGenerator(self.thresholds)

    async def run(self, audit_input: str, messages: List[Dict[str, Any]]) -> Review:
        """Call the model and sanitize its response.

        Args:
            audit_input: Trimmed audit input (used by the fallback generator)
            messages: Chat messages for the model

        Returns:
            Sanitized Review, or the fallback Review on quota exhaustion

        Raises:
            AuditFailedError: Transient failures outlasted the retry budget
            ModelCallError: Fatal model failure, or quota with fallback disabled
            ReviewParseError: The response held no JSON object
        """
        start = time.monotonic()
        policy = self.retry_policy

        for attempt in range(policy.max_attempts):
            try:
                text = await self.llm.complete_json(messages)
                review = sanitize_review(parse_model_json(text), self.thresholds)

                logger.info(format_event(
                    "llm.audit.success",
                    provider=self.llm.provider,
                    model=self.llm.model,
                    attempt=attempt + 1,
                    duration_ms=self._elapsed_ms(start),
                    score=review.score,
                    issues=len(review.issues),
                ))
                return review

            except ModelQuotaExceededError as e:
                if self.allow_fallback:
                    logger.warning(format_event(
                        "llm.audit.fallback_quota",
                        provider=self.llm.provider,
                        model=self.llm.model,
                        attempt=attempt + 1,
                        error=str(e),
                    ))
                    return self.fallback.generate(audit_input)
                logger.error(format_event("llm.audit.quota", attempt=attempt + 1, error=str(e)))
                raise

            except ModelRetryableError as e:
                if attempt < policy.max_retries:
                    delay = policy.delay_for(attempt)
                    logger.warning(format_event(
                        "llm.audit.retry",
                        provider=self.llm.provider,
                        model=self.llm.model,
                        attempt=attempt + 1,
                        wait_ms=int(delay * 1000),
                        error=str(e),
                    ))
                    await asyncio.sleep(delay)
                    continue

                logger.error(format_event(
                    "llm.audit.exhausted",
                    attempts=policy.max_attempts,
                    duration_ms=self._elapsed_ms(start),
                    error=str(e),
                ))
                raise AuditFailedError(
                    f"LLM audit failed after {policy.max_attempts} attempts: {e}"
                ) from e

            except ModelCallError as e:
                logger.error(format_event(
                    "llm.audit.error",
                    provider=self.llm.provider,
                    model=self.llm.model,
                    attempt=attempt + 1,
                    failure=e.failure,
                    error=str(e),
                ))
                raise

        raise AuditFailedError("LLM audit failed after retries.")

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
