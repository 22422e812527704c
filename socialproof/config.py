"""
SocialProof Configuration Module
================================

Centralized configuration management using environment variables.
Supports both .env files and system environment variables.

Environment Variables:
    YOUTUBE_API_KEY: YouTube Data API v3 key (optional)
    INSTAGRAM_ACCESS_TOKEN: Instagram Graph API token (optional)
    INSTAGRAM_BUSINESS_ACCOUNT_ID: Instagram business account id (optional)

    COLLECTION_MAX_REVIEWS_PER_PRODUCT: Accepted reviews per product per run (default: 50)
    COLLECTION_MAX_QUERIES: Search queries executed per product (default: 5)
    COLLECTION_RESULTS_PER_QUERY: Results requested per query (default: 20)
    COLLECTION_QUERY_DELAY: Seconds between two search calls (default: 0.5)
    COLLECTION_PRODUCT_DELAY: Seconds between two products (default: 1.0)
    COLLECTION_SEARCH_TIMEOUT: Timeout of one search call in seconds (default: 15)
    COLLECTION_DETAIL_TIMEOUT: Timeout of one detail lookup in seconds (default: 15)

    MATCH_NAME_ONLY_SCORE: Score when only the product name matches (default: 80)
    MATCH_HASHTAG_POINTS: Weighted-sum points per matched hashtag (default: 20)
    MATCH_HASHTAG_CAP: Weighted-sum cap for hashtag points (default: 60)
    MATCH_NAME_POINTS: Weighted-sum points for a product name match (default: 30)
    MATCH_REVIEW_KEYWORD_POINTS: Weighted-sum points for a review keyword (default: 10)
    MATCH_MIN_ACCEPT_SCORE: Weighted-sum acceptance threshold (default: 20)

    AI_PROVIDER: keyword | anthropic | openai (default: keyword)
    AI_MODEL: Model name (default depends on provider)
    ANTHROPIC_API_KEY / OPENAI_API_KEY: Provider credentials
    AI_CACHE_TTL_SECONDS: Analysis cache TTL (default: 1800)

    CACHE_BACKEND: memory | redis (default: memory)
    REDIS_URL: Redis URL when CACHE_BACKEND=redis

    SOCIALPROOF_DATA_FILE: JSON snapshot used by the CLI (default: data/socialproof.json)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv


# Load environment variables from .env file if present
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    """
    Get environment variable with optional default and required validation.

    Args:
        key: Environment variable name
        default: Default value if not set
        required: If True, raises ValueError when not set

    Returns:
        Environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set
    """
    value = os.getenv(key, default)
    if required and value is None:
        raise ValueError(f"Required environment variable '{key}' is not set")
    return value


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be an integer, got: {value}")


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable '{key}' must be a float, got: {value}")


def get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class PlatformCredentials:
    """Credentials of the external search platforms."""

    youtube_api_key: Optional[str] = field(default_factory=lambda: get_env("YOUTUBE_API_KEY"))
    instagram_access_token: Optional[str] = field(default_factory=lambda: get_env("INSTAGRAM_ACCESS_TOKEN"))
    instagram_business_account_id: Optional[str] = field(
        default_factory=lambda: get_env("INSTAGRAM_BUSINESS_ACCOUNT_ID")
    )


@dataclass
class CollectionConfig:
    """Collection loop policy (quota protection, caps, timeouts)."""

    max_reviews_per_product: int = field(
        default_factory=lambda: get_env_int("COLLECTION_MAX_REVIEWS_PER_PRODUCT", 50)
    )
    max_queries_per_product: int = field(default_factory=lambda: get_env_int("COLLECTION_MAX_QUERIES", 5))
    results_per_query: int = field(default_factory=lambda: get_env_int("COLLECTION_RESULTS_PER_QUERY", 20))

    # Courtesy delays between external calls
    query_delay_seconds: float = field(default_factory=lambda: get_env_float("COLLECTION_QUERY_DELAY", 0.5))
    product_delay_seconds: float = field(default_factory=lambda: get_env_float("COLLECTION_PRODUCT_DELAY", 1.0))

    search_timeout_seconds: float = field(default_factory=lambda: get_env_float("COLLECTION_SEARCH_TIMEOUT", 15.0))
    detail_timeout_seconds: float = field(default_factory=lambda: get_env_float("COLLECTION_DETAIL_TIMEOUT", 15.0))

    # Instagram hashtag search is expensive: only the first N hashtags are searched
    instagram_max_hashtags: int = field(default_factory=lambda: get_env_int("COLLECTION_INSTAGRAM_MAX_HASHTAGS", 3))

    review_qualifier: str = field(default_factory=lambda: get_env("COLLECTION_REVIEW_QUALIFIER", "review"))
    localized_review_qualifier: str = field(
        default_factory=lambda: get_env("COLLECTION_LOCALIZED_REVIEW_QUALIFIER", "리뷰")
    )

    def __post_init__(self):
        """Validate configuration."""
        if self.max_reviews_per_product <= 0:
            raise ValueError("max_reviews_per_product must be positive")
        if self.max_queries_per_product <= 0:
            raise ValueError("max_queries_per_product must be positive")
        if self.query_delay_seconds < 0 or self.product_delay_seconds < 0:
            raise ValueError("delays cannot be negative")


@dataclass
class MatchingConfig:
    """
    Thresholds of the two relevance policies.

    Hashtag-overlap policy (video platforms):
        score = matched / total * 100 when any product hashtag is found,
        otherwise name_only_score if the product name appears verbatim.

    Weighted-sum policy (photo platforms):
        min(hashtag_cap, hashtag_points * matched)
        + name_points if the product name matches
        + review_keyword_points if a review/recommendation keyword appears,
        accepted when the total reaches min_accept_score.
    """

    name_only_score: int = field(default_factory=lambda: get_env_int("MATCH_NAME_ONLY_SCORE", 80))
    hashtag_points: int = field(default_factory=lambda: get_env_int("MATCH_HASHTAG_POINTS", 20))
    hashtag_cap: int = field(default_factory=lambda: get_env_int("MATCH_HASHTAG_CAP", 60))
    name_points: int = field(default_factory=lambda: get_env_int("MATCH_NAME_POINTS", 30))
    review_keyword_points: int = field(default_factory=lambda: get_env_int("MATCH_REVIEW_KEYWORD_POINTS", 10))
    min_accept_score: int = field(default_factory=lambda: get_env_int("MATCH_MIN_ACCEPT_SCORE", 20))
    max_score: int = 100

    review_keywords: Tuple[str, ...] = (
        "리뷰", "review", "후기", "추천", "recommend", "좋아요", "love", "amazing", "best",
    )

    def __post_init__(self):
        """Validate configuration."""
        if not 0 <= self.min_accept_score <= self.max_score:
            raise ValueError("min_accept_score must be within [0, max_score]")
        if not 0 <= self.name_only_score <= self.max_score:
            raise ValueError("name_only_score must be within [0, max_score]")


@dataclass
class AIConfig:
    """AI-assisted summarization configuration."""

    provider: str = field(default_factory=lambda: get_env("AI_PROVIDER", "keyword"))
    model: Optional[str] = field(default_factory=lambda: get_env("AI_MODEL"))
    anthropic_api_key: Optional[str] = field(default_factory=lambda: get_env("ANTHROPIC_API_KEY"))
    openai_api_key: Optional[str] = field(
        default_factory=lambda: get_env("OPENAI_API_KEY") or get_env("GPT_API_KEY")
    )

    max_tokens: int = field(default_factory=lambda: get_env_int("AI_MAX_TOKENS", 1500))
    request_timeout_seconds: float = field(default_factory=lambda: get_env_float("AI_REQUEST_TIMEOUT", 60.0))
    cache_ttl_seconds: int = field(default_factory=lambda: get_env_int("AI_CACHE_TTL_SECONDS", 30 * 60))

    # Operator feedback (few-shot examples)
    feedback_history_limit: int = field(default_factory=lambda: get_env_int("AI_FEEDBACK_HISTORY_LIMIT", 10))
    feedback_prompt_examples: int = field(default_factory=lambda: get_env_int("AI_FEEDBACK_PROMPT_EXAMPLES", 5))

    max_review_chars: int = field(default_factory=lambda: get_env_int("AI_MAX_REVIEW_CHARS", 500))

    def __post_init__(self):
        """Validate configuration."""
        self.provider = (self.provider or "keyword").lower()
        if self.provider not in ("keyword", "anthropic", "openai"):
            raise ValueError(f"AI_PROVIDER must be keyword, anthropic or openai, got: {self.provider}")
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive")
        if self.feedback_history_limit <= 0:
            raise ValueError("feedback_history_limit must be positive")

    @property
    def enabled(self) -> bool:
        """True when an AI provider is selected and has credentials."""
        if self.provider == "anthropic":
            return bool(self.anthropic_api_key and self.anthropic_api_key.strip().startswith("sk-ant-"))
        if self.provider == "openai":
            return bool(self.openai_api_key)
        return False


@dataclass
class CacheConfig:
    """Analysis cache backend configuration."""

    backend: str = field(default_factory=lambda: get_env("CACHE_BACKEND", "memory"))
    redis_url: Optional[str] = field(default_factory=lambda: get_env("REDIS_URL"))
    prefix: str = field(default_factory=lambda: get_env("CACHE_PREFIX", "socialproof"))

    def __post_init__(self):
        """Validate configuration."""
        self.backend = self.backend.lower()
        if self.backend not in ("memory", "redis"):
            raise ValueError(f"CACHE_BACKEND must be memory or redis, got: {self.backend}")


@dataclass
class StorageConfig:
    """JSON snapshot location used by the CLI."""

    data_file: str = field(default_factory=lambda: get_env("SOCIALPROOF_DATA_FILE", "data/socialproof.json"))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: get_env("LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: get_env("LOG_FILE"))

    # Structured logging
    json_logs: bool = field(default_factory=lambda: get_env_bool("LOG_JSON", False))


@dataclass
class Settings:
    """Main application settings container."""

    platforms: PlatformCredentials = field(default_factory=PlatformCredentials)
    collection: CollectionConfig = field(default_factory=CollectionConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_settings() -> Settings:
    """
    Load and validate all application settings.

    Raises:
        ValueError: If configuration is invalid
    """
    return Settings()


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
