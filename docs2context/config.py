"""Centralised settings for docs2context.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Crawl limits
    # ------------------------------------------------------------------
    max_depth: int = field(
        default_factory=lambda: int(os.environ.get("MAX_DEPTH", "4"))
    )
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("MAX_PAGES", "500"))
    )
    concurrency: int = field(
        default_factory=lambda: int(os.environ.get("CONCURRENCY", "10"))
    )
    refine_concurrency: int = field(
        default_factory=lambda: int(os.environ.get("REFINE_CONCURRENCY", "3"))
    )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    discovery_timeout: float = field(
        default_factory=lambda: float(os.environ.get("DISCOVERY_TIMEOUT", "10.0"))
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "15.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        )
    )

    # ------------------------------------------------------------------
    # Extraction / classification
    # ------------------------------------------------------------------
    min_content_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_CONTENT_LENGTH", "100"))
    )
    classifier_policy: str = field(
        default_factory=lambda: os.environ.get("CLASSIFIER_POLICY", "permissive")
    )

    # ------------------------------------------------------------------
    # Refinement model
    # ------------------------------------------------------------------
    refine_enabled: bool = field(
        default_factory=lambda: os.environ.get("REFINE_ENABLED", "true").lower() in _TRUTHY
    )
    refine_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REFINE_TIMEOUT", "15.0"))
    )
    min_refined_length: int = field(
        default_factory=lambda: int(os.environ.get("MIN_REFINED_LENGTH", "100"))
    )
    min_refined_ratio: float = field(
        default_factory=lambda: float(os.environ.get("MIN_REFINED_RATIO", "0.5"))
    )
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openai")
    )
    openai_base_url: str = field(
        default_factory=lambda: os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "llama3.1:8b")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )


# Module-level singleton; import this everywhere:
#   from docs2context.config import settings
settings = Settings()


@dataclass(frozen=True)
class CrawlConfig:
    """Per-crawl knobs handed to the pipeline.

    ``refine_concurrency`` never exceeds ``concurrency``: the refinement
    service is assumed to have stricter rate limits than the crawled site.
    """

    max_depth: int = 4
    max_pages: int = 500
    concurrency: int = 10
    refine_concurrency: int = 3
    refine: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.refine_concurrency < 1:
            raise ValueError(
                f"refine_concurrency must be >= 1, got {self.refine_concurrency}"
            )
        if self.refine_concurrency > self.concurrency:
            object.__setattr__(self, "refine_concurrency", self.concurrency)

    @classmethod
    def from_settings(cls, **overrides) -> "CrawlConfig":
        """Build a config from ``settings``; ``None`` overrides are ignored."""
        config = cls(
            max_depth=settings.max_depth,
            max_pages=settings.max_pages,
            concurrency=settings.concurrency,
            refine_concurrency=min(settings.refine_concurrency, settings.concurrency),
            refine=settings.refine_enabled,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides) if overrides else config
