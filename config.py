# backend/config.py
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.1-8b-instant"
DEFAULT_MAIL_FROM = '"Meeting Summarizer" <no-reply@mock.dev>'


def parse_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"true", "1", "yes"}


def parse_origins(value: Optional[str]) -> List[str]:
    return [origin.strip() for origin in (value or "").split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    use_mock: bool = True
    llm_api_key: Optional[str] = None
    llm_base_url: str = DEFAULT_BASE_URL
    llm_model: str = DEFAULT_MODEL
    llm_temperature: float = 0.2
    mock_max_points: int = 6
    allowed_origins: List[str] = field(default_factory=list)
    max_body_bytes: int = 10 * 1024 * 1024
    smtp_host: str = "smtp.ethereal.email"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    mail_from: str = DEFAULT_MAIL_FROM
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "info"

    @property
    def mock_mode(self) -> bool:
        # No credential forces mock mode regardless of USE_MOCK
        return self.use_mock or not self.llm_api_key

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables (and .env, if present)."""
        if dotenv:
            load_dotenv()

        api_key = (
            os.getenv("GROQ_API_KEY")
            or os.getenv("LLM_API_KEY")
            or os.getenv("OPENAI_API_KEY")
            or None
        )
        return cls(
            use_mock=parse_bool(os.getenv("USE_MOCK"), cls.use_mock),
            llm_api_key=api_key,
            llm_base_url=os.getenv("LLM_BASE_URL") or cls.llm_base_url,
            llm_model=os.getenv("LLM_MODEL") or cls.llm_model,
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", cls.llm_temperature)),
            mock_max_points=int(os.getenv("MOCK_MAX_POINTS", cls.mock_max_points)),
            allowed_origins=parse_origins(os.getenv("FRONTEND_ORIGINS")),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", cls.max_body_bytes)),
            smtp_host=os.getenv("SMTP_HOST") or cls.smtp_host,
            smtp_port=int(os.getenv("SMTP_PORT", cls.smtp_port)),
            smtp_user=os.getenv("SMTP_USER") or None,
            smtp_password=os.getenv("SMTP_PASS") or None,
            mail_from=os.getenv("MAIL_FROM") or cls.mail_from,
            host=os.getenv("HOST") or cls.host,
            port=int(os.getenv("PORT", cls.port)),
            log_level=os.getenv("LOG_LEVEL") or cls.log_level,
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
