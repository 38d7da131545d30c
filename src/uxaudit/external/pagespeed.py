"""
Google PageSpeed Insights API Client

Provides Lighthouse category scores and key metrics for the health score
and the audit diff.
API Documentation: https://developers.google.com/speed/docs/insights/v5/get-started
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from uxaudit.constants import PAGESPEED_RETRYABLE_STATUS_CODES
from uxaudit.models import PerformanceReport
from uxaudit.performance import create_fallback_performance_report, report_from_pagespeed

logger = logging.getLogger(__name__)


class PageSpeedClient:
    """Client for Google PageSpeed Insights API v5.

    `get_report` never raises: any failure (or a missing API key) yields
    the uniform fallback report instead.
    """

    API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
    CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 120.0,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize PageSpeed Insights API client.

        Args:
            api_key: Google API key with PageSpeed Insights API enabled
            timeout: Request timeout in seconds
            max_retries: Retries after the first attempt for transient errors
            retry_delay: Initial retry delay in seconds (doubles per retry)
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport

    async def get_report(self, url: str) -> PerformanceReport:
        """
        Fetch desktop and mobile results in parallel and build a report.

        Args:
            url: URL to analyze

        Returns:
            PerformanceReport (the fallback report on any failure)
        """
        if not self.api_key:
            logger.warning(f"[PSI] performance.missing_api_key url={url}")
            return create_fallback_performance_report(url)

        start = time.monotonic()
        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout, transport=self._transport
                ) as client:
                    # Both strategies finish before the client closes
                    results = await asyncio.gather(
                        self._fetch(client, url, "desktop"),
                        self._fetch(client, url, "mobile"),
                        return_exceptions=True,
                    )
                for result in results:
                    if isinstance(result, BaseException):
                        raise result
                desktop, mobile = results

                report = report_from_pagespeed(desktop, mobile)
                logger.info(
                    f"[PSI] performance.success url={url} "
                    f"duration_ms={int((time.monotonic() - start) * 1000)} "
                    f"perf={report.performance.score} overall={report.overall_performance_score} "
                    f"metrics={len(report.performance.metrics)}"
                )
                return report

            except Exception as e:
                error_msg = str(e) if str(e) else type(e).__name__
                if self._is_retryable(e) and attempt < self.max_retries:
                    wait = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"[PSI] performance.retry url={url} attempt={attempt + 1} "
                        f"wait_ms={int(wait * 1000)} error={error_msg}"
                    )
                    await asyncio.sleep(wait)
                    continue

                logger.error(
                    f"[PSI] performance.error url={url} attempt={attempt + 1} error={error_msg}"
                )
                return create_fallback_performance_report(url)

        return create_fallback_performance_report(url)

    async def _fetch(
        self, client: httpx.AsyncClient, url: str, strategy: str
    ) -> Dict[str, Any]:
        params = {
            "url": url,
            "key": self.api_key,
            "strategy": strategy,
            "category": self.CATEGORIES,
        }
        logger.debug(f"[PSI] Analyzing {url} ({strategy})")
        response = await client.get(self.API_URL, params=params)
        response.raise_for_status()
        data = response.json()
        lighthouse = data.get("lighthouseResult") if isinstance(data, dict) else None
        if not isinstance(lighthouse, dict) or not isinstance(lighthouse.get("categories"), dict):
            raise ValueError(
                f"Unexpected PageSpeed response for {strategy}: no lighthouse categories"
            )
        return data

    @staticmethod
    def _is_retryable(error: Exception) -> bool:
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code in PAGESPEED_RETRYABLE_STATUS_CODES
        return isinstance(error, (httpx.TimeoutException, httpx.NetworkError))
