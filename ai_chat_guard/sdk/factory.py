"""
Assistant selection.

Picks the live client or the local substitute from configuration.
Selection never raises: every path ends in a usable assistant.
"""

import logging
import os
from typing import Any, Mapping, Optional

from ..config.loader import AssistantConfig, build_model_policy
from ..core.retry import RetryPolicy
from ..core.usage import UsageTracker
from .local_assistant import LocalAssistant
from .openrouter_client import LiveAssistant
from .types import Assistant

logger = logging.getLogger(__name__)

API_KEY_ENV = "OPENROUTER_API_KEY"
API_KEY_PREFIX = "sk-or-"


def is_valid_api_key(api_key: Optional[str]) -> bool:
    """Check an OpenRouter key has the expected prefix."""
    return bool(api_key) and api_key.strip().startswith(API_KEY_PREFIX)


def create_assistant(
    config: Optional[AssistantConfig] = None,
    client: Optional[Any] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Assistant:
    """Create the assistant a caller should use.

    Decision order:
    1. force_local set -> local substitute
    2. explicit api_key -> live client if the prefix is valid, else local
    3. OPENROUTER_API_KEY from the environment -> same prefix check
    4. no key anywhere -> local substitute

    Args:
        config: Assistant configuration (defaults apply when omitted)
        client: Pre-built AsyncOpenAI-compatible client for the live path
        environ: Environment mapping (defaults to os.environ)

    Returns:
        LiveAssistant or LocalAssistant
    """
    config = config or AssistantConfig()
    env = os.environ if environ is None else environ

    if config.force_local:
        logger.info("Local assistant forced by configuration")
        return LocalAssistant()

    if config.api_key:
        api_key = config.api_key
        source = "configuration"
    else:
        api_key = env.get(API_KEY_ENV)
        source = API_KEY_ENV
        if not api_key:
            logger.info("No OpenRouter API key configured, using local assistant")
            return LocalAssistant()

    if not is_valid_api_key(api_key):
        logger.warning(
            "OpenRouter API key from %s does not start with %r, using local assistant",
            source, API_KEY_PREFIX
        )
        return LocalAssistant()

    # Fallback replies count toward the live instance's statistics
    usage = UsageTracker()
    try:
        return LiveAssistant(
            api_key=api_key.strip(),
            site_name=config.site_name,
            model_policy=build_model_policy(config),
            model=config.model,
            timeout=config.timeout_seconds,
            retry_policy=RetryPolicy(
                max_retries=config.max_retries,
                base_delay=config.backoff_base_seconds
            ),
            fallback=LocalAssistant(usage=usage) if config.fallback_to_local else None,
            client=client,
            usage=usage,
        )
    except Exception:
        logger.exception("Could not create OpenRouter assistant, using local assistant")
        return LocalAssistant()
