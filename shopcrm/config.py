"""
Shop CRM Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

# Load .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        _logger.critical(f"{name} must be an integer, got {raw!r}")
        raise ValueError(f"{name} must be an integer, got {raw!r}")


class Config:
    """Application configuration."""

    # Business identity (quote headers, reports, PDF footer)
    COMPANY_NAME = os.getenv('COMPANY_NAME', 'JF Serralheria')
    COMPANY_TAGLINE = os.getenv('COMPANY_TAGLINE', 'Gestão Inteligente & Serviços')

    # New projects saved from a quote get this many days until the deadline
    DEFAULT_DEADLINE_DAYS = _int_env('DEFAULT_DEADLINE_DAYS', '14')

    # AI Configuration
    # Gemini (default: proposals and feasibility analysis)
    DEFAULT_AI_MODEL = os.getenv('DEFAULT_AI_MODEL', 'gemini')
    GEMINI_API_KEY = os.getenv('GEMINI_API_KEY', '')
    GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')
    GEMINI_BASE_URL = os.getenv('GEMINI_BASE_URL', 'https://generativelanguage.googleapis.com/v1beta')
    # Claude and DeepSeek remain available through the same router
    ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY', '')
    CLAUDE_MODEL = os.getenv('CLAUDE_MODEL', 'claude-sonnet-4-5')
    DEEPSEEK_API_KEY = os.getenv('DEEPSEEK_API_KEY', '')
    DEEPSEEK_BASE_URL = os.getenv('DEEPSEEK_BASE_URL', 'https://api.deepseek.com')

    # Chat notifications (Telegram bot). Set in .env, never hardcode tokens here
    TELEGRAM_BOT_TOKEN = os.getenv('TELEGRAM_BOT_TOKEN', '')
    TELEGRAM_CHAT_ID = os.getenv('TELEGRAM_CHAT_ID', '')
    TELEGRAM_API_URL = os.getenv('TELEGRAM_API_URL', 'https://api.telegram.org')

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS = _int_env('HTTP_TIMEOUT_SECONDS', '30')

    # Where exported quote PDFs are written
    EXPORT_DIR = Path(os.getenv('EXPORT_DIR', str(Path(__file__).parent.parent / 'data' / 'exports')))


# Singleton instance
config = Config()
