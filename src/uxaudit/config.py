from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import os

from pydantic import BaseModel, ConfigDict, Field

from uxaudit.constants import MAX_AUDIT_INPUT_CHARS


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass
class Config:
    """Configuration for the UX audit engine."""
    llm_api_key: Optional[str] = None
    llm_provider: str = "openai"  # 'openai' or 'anthropic'
    llm_model: str = "gpt-4o-mini"
    llm_base_url: Optional[str] = None  # OpenAI-compatible endpoints (Groq, xAI)
    llm_timeout: float = 60.0
    allow_llm_fallback: bool = True
    log_level: str = "INFO"
    max_audit_input_chars: int = MAX_AUDIT_INPUT_CHARS

    # PageSpeed Insights API
    pagespeed_api_key: Optional[str] = None
    user_agent: str = "UX-Health-Audit-Bot/1.0"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables (and a .env file).

        Returns:
            Config: Configuration instance with values from environment
        """
        load_dotenv()
        return cls(
            llm_api_key=os.getenv("LLM_API_KEY"),
            llm_provider=os.getenv("LLM_PROVIDER", "openai").lower(),
            llm_model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            llm_base_url=os.getenv("LLM_BASE_URL") or None,
            llm_timeout=float(os.getenv("LLM_TIMEOUT", "60")),
            allow_llm_fallback=_env_flag("ALLOW_LLM_FALLBACK", True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            max_audit_input_chars=int(
                os.getenv("MAX_AUDIT_INPUT_CHARS", str(MAX_AUDIT_INPUT_CHARS))
            ),
            pagespeed_api_key=os.getenv("PAGESPEED_API_KEY") or None,
            user_agent=os.getenv("USER_AGENT", "UX-Health-Audit-Bot/1.0"),
        )


class RetryPolicy(BaseModel):
    """
    Bounded exponential backoff for transient model-call failures.

    Quota exhaustion is never retried regardless of this policy.
    """

    max_retries: int = Field(
        default=2,
        description="Retries after the first attempt",
        ge=0,
        le=5
    )

    initial_delay_seconds: float = Field(
        default=0.3,
        description="Delay before the first retry",
        ge=0.0
    )

    backoff_factor: float = Field(
        default=2.0,
        description="Multiplier applied to the delay after each retry",
        ge=1.0
    )

    max_delay_seconds: float = Field(
        default=5.0,
        description="Upper bound for any single delay",
        ge=0.0
    )

    model_config = ConfigDict(frozen=True)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given zero-based attempt.

        Args:
            attempt: Zero-based index of the attempt that just failed

        Returns:
            Delay in seconds, capped at max_delay_seconds
        """
        delay = self.initial_delay_seconds * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay_seconds)


@dataclass
class ScoringThresholds:
    """Tunable thresholds for scoring, diffing and alerting."""

    # Section score offsets from the overall score when a section is unset
    accessibility_offset: int = 8
    seo_offset: int = 6
    visual_offset: int = 5

    # Content quality
    density_min: float = 0.8  # percentage
    density_max: float = 1.5
    stuffing_high_density: float = 2.6
    stuffing_medium_density: float = 1.8
    stuffing_high_repeats: int = 4
    stuffing_medium_repeats: int = 2
    long_paragraph_words: int = 150
    wall_of_text_words: int = 220
    long_sentence_words: int = 25
    complex_sentence_words: int = 20
    passive_voice_target: float = 10.0  # percent of sentences
    long_sentence_target: float = 25.0
    semantic_coverage_floor: int = 45
    intent_alignment_floor: int = 60

    # Diff tolerances
    cls_tolerance: float = 0.03
    timing_tolerance_seconds: float = 0.15

    # Alerts (points dropped between consecutive audits)
    score_drop_warning: int = 10
    score_drop_critical: int = 20

    # Fallback review
    fallback_evidence_length: int = 140

    @classmethod
    def from_env(cls) -> "ScoringThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with UXAUDIT_THRESHOLD_
        e.g., UXAUDIT_THRESHOLD_SCORE_DROP_WARNING=15

        Returns:
            ScoringThresholds with values from environment
        """
        thresholds = cls()
        prefix = "UXAUDIT_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                field_type = thresholds.__dataclass_fields__[field_name].type
                try:
                    if field_type in (int, "int"):
                        setattr(thresholds, field_name, int(env_value))
                    elif field_type in (float, "float"):
                        setattr(thresholds, field_name, float(env_value))
                except ValueError:
                    pass  # Keep default if conversion fails

        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "ScoringThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            ScoringThresholds with values from file
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                setattr(thresholds, field_name, threshold_config[field_name])

        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary.

        Returns:
            Dictionary of all threshold values
        """
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }

    def save_to_file(self, path: str) -> None:
        """Save current thresholds to a JSON file.

        Args:
            path: Path to save configuration
        """
        with open(path, 'w') as f:
            json.dump({'thresholds': self.to_dict()}, f, indent=2)
