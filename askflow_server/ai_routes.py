"""API route that forwards a prompt to a text-generation provider.

Supports an OpenAI-compatible endpoint (OpenRouter by default) and
Anthropic (Claude) models.
"""

import logging
import os

from fastapi import APIRouter, HTTPException

from askflow.models.saved_query import AskAIRequest, AskAIResult

logger = logging.getLogger(__name__)

router = APIRouter()

PROVIDER = os.getenv("ASKFLOW_PROVIDER", "openai")
MODEL = os.getenv("ASKFLOW_MODEL", "google/gemini-2.0-flash-exp:free")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://openrouter.ai/api/v1")
MAX_TOKENS = int(os.getenv("ASKFLOW_MAX_TOKENS", "1024"))

RATE_LIMIT_DETAIL = "Rate limit exceeded. Please try again later."
NO_RESPONSE_TEXT = "No response received"

# LLM Client instances (lazily initialized)
_openai_client = None
_anthropic_client = None


def _get_openai_client():
    """Get or create the OpenAI-compatible client."""
    global _openai_client
    if _openai_client is None:
        import openai
        api_key = os.getenv("OPENROUTER_API_KEY") or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise HTTPException(
                status_code=500,
                detail="OPENROUTER_API_KEY or OPENAI_API_KEY environment variable not set",
            )
        _openai_client = openai.AsyncOpenAI(api_key=api_key, base_url=OPENAI_BASE_URL)
    return _openai_client


def _get_anthropic_client():
    """Get or create Anthropic client."""
    global _anthropic_client
    if _anthropic_client is None:
        import anthropic
        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise HTTPException(
                status_code=500,
                detail="ANTHROPIC_API_KEY environment variable not set",
            )
        _anthropic_client = anthropic.AsyncAnthropic(api_key=api_key)
    return _anthropic_client


async def _call_openai(prompt: str, model: str) -> AskAIResult:
    import openai

    client = _get_openai_client()
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
        )
    except openai.RateLimitError as e:
        logger.warning("upstream rate limit: %s", e)
        raise HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
    except Exception as e:
        logger.warning("upstream error: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to get AI response: {e}")

    content = ""
    if response.choices:
        content = response.choices[0].message.content or ""
    return AskAIResult(response=content or NO_RESPONSE_TEXT, model=response.model or model)


async def _call_anthropic(prompt: str, model: str) -> AskAIResult:
    import anthropic

    client = _get_anthropic_client()
    try:
        # anthropic requires max_tokens
        response = await client.messages.create(
            model=model,
            max_tokens=MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.RateLimitError as e:
        logger.warning("upstream rate limit: %s", e)
        raise HTTPException(status_code=429, detail=RATE_LIMIT_DETAIL)
    except Exception as e:
        logger.warning("upstream error: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to get AI response: {e}")

    content = "".join(
        block.text for block in (response.content or [])
        if hasattr(block, "text")
    )
    return AskAIResult(response=content or NO_RESPONSE_TEXT, model=response.model or model)


async def _call_llm(prompt: str, provider: str, model: str) -> AskAIResult:
    provider_lower = provider.lower()
    if provider_lower == "openai":
        return await _call_openai(prompt, model)
    elif provider_lower == "anthropic":
        return await _call_anthropic(prompt, model)
    raise HTTPException(
        status_code=500,
        detail=f"Unsupported provider: {provider}. Supported: openai, anthropic",
    )


@router.post("/ask-ai", response_model=AskAIResult)
async def ask_ai(request: AskAIRequest) -> AskAIResult:
    """Generate a response for a single prompt."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")
    return await _call_llm(request.prompt, PROVIDER, MODEL)
