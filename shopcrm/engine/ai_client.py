"""
AI Client - One entry point, call_ai(), over the text-generation backends.

  gemini             Gemini generateContent (REST, default)
  claude             Anthropic Messages API (SDK)
  deepseek-chat      DeepSeek chat completions (REST, OpenAI-compatible)
  deepseek-reasoner  same endpoint, reasoning model

Missing API keys raise ValueError; transport and response-shape problems
raise RuntimeError. Callers turn either into a failed Result.
"""

import logging
from typing import Any, Dict, Optional

import requests
from anthropic import Anthropic

from shopcrm.config import config

logger = logging.getLogger(__name__)

MODEL_CHOICES = ['gemini', 'claude', 'deepseek-chat', 'deepseek-reasoner']

DEFAULT_SYSTEM = "Você é um especialista em vendas de serralheria."


def _require_key(value: str, name: str) -> str:
    if not value:
        raise ValueError(f"{name} not set in environment")
    return value


def _post_json(backend: str, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
    """POST a JSON body and return the decoded reply, or raise RuntimeError."""
    logger.debug(f"{backend}: POST {url.split('?')[0]}")
    try:
        response = requests.post(url, json=payload, headers=headers,
                                 timeout=(10, config.HTTP_TIMEOUT_SECONDS), verify=True)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"{backend} API error: {e}")
        raise RuntimeError(f"Failed to call {backend} API: {e}")
    except ValueError as e:
        logger.error(f"{backend} returned a non-JSON body: {e}")
        raise RuntimeError(f"Unexpected {backend} response format: {e}")


# =============================================================================
# BACKENDS
# =============================================================================

def call_gemini(
    prompt: str,
    system: Optional[str] = None,
    max_tokens: int = 2000,
    temperature: float = 0.7,
) -> str:
    """Gemini generateContent. Returns '' when the reply has no candidates (e.g. blocked)."""
    key = _require_key(config.GEMINI_API_KEY, 'GEMINI_API_KEY')

    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
    }
    if system:
        payload["systemInstruction"] = {"parts": [{"text": system}]}

    reply = _post_json(
        'Gemini',
        f"{config.GEMINI_BASE_URL}/models/{config.GEMINI_MODEL}:generateContent",
        payload,
        {"x-goog-api-key": key, "Content-Type": "application/json"},
    )

    candidates = reply.get('candidates') or []
    if not candidates:
        logger.warning(f"Gemini returned no candidates (feedback: {reply.get('promptFeedback')})")
        return ''
    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts)


def call_claude(
    prompt: str,
    system: Optional[str] = None,
    max_tokens: int = 2000,
    temperature: float = 0.7,
) -> str:
    """Anthropic Messages API through the official SDK."""
    client = Anthropic(api_key=_require_key(config.ANTHROPIC_API_KEY, 'ANTHROPIC_API_KEY'))

    logger.debug(f"Claude: model {config.CLAUDE_MODEL}")
    try:
        message = client.messages.create(
            model=config.CLAUDE_MODEL,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system or DEFAULT_SYSTEM,
            messages=[{"role": "user", "content": prompt}],
        )
        return ''.join(getattr(block, 'text', '') for block in message.content)
    except Exception as e:
        logger.error(f"Claude API error: {e}")
        raise RuntimeError(f"Failed to call Claude API: {e}")


def call_deepseek(
    prompt: str,
    model: str = 'deepseek-chat',
    system: Optional[str] = None,
    max_tokens: int = 2000,
    temperature: float = 0.7,
) -> str:
    """DeepSeek chat completions (OpenAI wire format)."""
    key = _require_key(config.DEEPSEEK_API_KEY, 'DEEPSEEK_API_KEY')

    messages = [{"role": "system", "content": system}] if system else []
    messages.append({"role": "user", "content": prompt})

    reply = _post_json(
        'DeepSeek',
        f"{config.DEEPSEEK_BASE_URL}/chat/completions",
        {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        },
        {"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
    )

    try:
        return reply['choices'][0]['message']['content']
    except (KeyError, IndexError, TypeError) as e:
        logger.error(f"DeepSeek response parse error: {e}")
        raise RuntimeError(f"Unexpected DeepSeek response format: {e}")


# =============================================================================
# ROUTER
# =============================================================================

def call_ai(
    prompt: str,
    model: Optional[str] = None,
    system: Optional[str] = None,
    max_tokens: int = 2000,
    temperature: float = 0.7,
) -> str:
    """
    Generate text with the chosen backend.

    Args:
        prompt: User prompt text
        model: One of MODEL_CHOICES; config.DEFAULT_AI_MODEL when omitted
        system: Optional system instruction
        max_tokens: Output token cap
        temperature: Sampling temperature

    Returns: Generated text ('' if the backend produced nothing)
    """
    model = model or config.DEFAULT_AI_MODEL
    options = dict(system=system, max_tokens=max_tokens, temperature=temperature)

    if model == 'gemini':
        return call_gemini(prompt, **options)
    if model == 'claude':
        return call_claude(prompt, **options)
    if model in ('deepseek-chat', 'deepseek-reasoner'):
        return call_deepseek(prompt, model=model, **options)
    raise ValueError(f"Unknown AI model '{model}'. Choose from: {', '.join(MODEL_CHOICES)}")
