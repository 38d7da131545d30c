"""
UX audit exceptions
"""


class UXAuditError(Exception):
    """Base exception for audit errors"""


class ExtractionError(UXAuditError):
    """Raised when a page cannot be captured into a signal snapshot"""


class ReviewParseError(UXAuditError):
    """Raised when a model response holds no JSON object at all"""


class ModelCallError(UXAuditError):
    """Base exception for typed model-call failures"""

    failure = "fatal"


class ModelQuotaExceededError(ModelCallError):
    """Raised when the provider quota is exhausted; never retried"""

    failure = "quota_exceeded"


class ModelRetryableError(ModelCallError):
    """Raised for transient failures (timeouts, 5xx, rate limiting)"""

    failure = "retryable"


class ModelFatalError(ModelCallError):
    """Raised for failures that retrying cannot fix"""

    failure = "fatal"


class AuditFailedError(UXAuditError):
    """Raised when the model call still fails after all retries"""
