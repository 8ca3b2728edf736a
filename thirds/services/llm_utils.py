"""
Shared LLM invocation utilities for text generation.
"""

from __future__ import annotations

from typing import Optional

from thirds.core.logger import setup_logger
from thirds.infrastructure.local.gemini_api_provider import GeminiAPIProvider
from thirds.infrastructure.local.litellm_provider import LiteLLMProvider
from thirds.interfaces.llm_provider import ILLMProvider

logger = setup_logger(__name__)


def generate_text(
    llm_provider: ILLMProvider,
    prompt: str,
    temperature: float = 0.2,
    max_output_tokens: int = 600,
    system_instruction: Optional[str] = None,
) -> Optional[str]:
    """
    Generate text from the configured LLM provider.

    Blocking; async callers run it in a worker thread.
    Returns None when the provider is unavailable or the call fails.
    """
    if not prompt:
        return None

    if isinstance(llm_provider, LiteLLMProvider):
        return _generate_text_litellm(
            llm_provider=llm_provider,
            prompt=prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            system_instruction=system_instruction,
        )
    if isinstance(llm_provider, GeminiAPIProvider):
        return _generate_text_genai(
            llm_provider=llm_provider,
            prompt=prompt,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            system_instruction=system_instruction,
        )

    logger.warning(f"Unsupported LLM provider: {llm_provider.get_model_name()}")
    return None


def _generate_text_genai(
    llm_provider: GeminiAPIProvider,
    prompt: str,
    temperature: float,
    max_output_tokens: int,
    system_instruction: Optional[str],
) -> Optional[str]:
    from google import genai
    from google.genai.types import Content, GenerateContentConfig, Part

    config_kwargs: dict = {
        "temperature": temperature,
        "max_output_tokens": max_output_tokens,
    }
    if system_instruction:
        config_kwargs["system_instruction"] = system_instruction

    try:
        client = genai.Client(api_key=llm_provider.get_api_key())
        response = client.models.generate_content(
            model=llm_provider.get_model(),
            contents=[Content(role="user", parts=[Part(text=prompt)])],
            config=GenerateContentConfig(**config_kwargs),
        )
        text = (response.text or "").strip()
        return text or None
    except Exception as exc:
        logger.warning(f"GenAI request failed: {exc}")
    return None


def _generate_text_litellm(
    llm_provider: LiteLLMProvider,
    prompt: str,
    temperature: float,
    max_output_tokens: int,
    system_instruction: Optional[str],
) -> Optional[str]:
    import litellm

    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    messages.append({"role": "user", "content": prompt})

    kwargs: dict = {
        "model": llm_provider.get_model(),
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_output_tokens,
    }
    if llm_provider.get_api_base():
        kwargs["api_base"] = llm_provider.get_api_base()
    if llm_provider.get_api_key():
        kwargs["api_key"] = llm_provider.get_api_key()

    try:
        response = litellm.completion(**kwargs)
        content = response.choices[0].message.content if response.choices else ""
        text = (content or "").strip()
        return text or None
    except Exception as exc:
        logger.warning(f"LiteLLM request failed: {exc}")
        return None
