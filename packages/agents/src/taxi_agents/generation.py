"""Generation capability backed by the Anthropic Messages API.

Documents travel inline: images as base64 image blocks, PDFs as base64
document blocks and plain text as a text block. Transient failures get a
small bounded retry with exponential backoff; rejected credentials are a
configuration error and are never retried.
"""

import asyncio
import base64
from typing import Any, Optional

import anthropic
import structlog

from taxi_core.exceptions import ConfigurationError, GenerationError

from .config import LLMConfig, PipelineConfig

logger = structlog.get_logger()

IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
PDF_MIME_TYPE = "application/pdf"

RETRYABLE_ERRORS = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,  # includes APITimeoutError
    anthropic.InternalServerError,
    asyncio.TimeoutError,  # request_timeout enforced around each attempt
)

CREDENTIAL_ERRORS = (
    anthropic.AuthenticationError,
    anthropic.PermissionDeniedError,
)


def build_content_blocks(
    prompt: str,
    content: Optional[bytes] = None,
    mime_type: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Build the user message blocks: the document first, then the prompt.

    Raises:
        GenerationError: If the MIME type cannot be sent inline.
    """
    blocks: list[dict[str, Any]] = []

    if content is not None:
        media_type = (mime_type or "").split(";")[0].strip().lower()
        if media_type in IMAGE_MIME_TYPES or media_type == PDF_MIME_TYPE:
            blocks.append({
                "type": "image" if media_type in IMAGE_MIME_TYPES else "document",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": base64.standard_b64encode(content).decode("ascii"),
                },
            })
        elif media_type.startswith("text/"):
            blocks.append({
                "type": "text",
                "text": content.decode("utf-8", errors="replace"),
            })
        else:
            raise GenerationError(
                f"Unsupported MIME type for extraction: {mime_type or 'unknown'}",
                recoverable=False,
            )

    blocks.append({"type": "text", "text": prompt})
    return blocks


class AnthropicGenerationClient:
    """
    GenerationClient implementation using the Anthropic async SDK.

    The SDK's own retries are disabled so that the attempt budget stays the
    one configured in PipelineConfig. Each attempt is bounded by
    ``LLMConfig.request_timeout``; a timed-out attempt is retried like any
    other transient failure.
    """

    def __init__(
        self,
        llm: LLMConfig,
        pipeline: Optional[PipelineConfig] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        """
        Initialize the generation client.

        Args:
            llm: Model, credentials and timeout settings
            pipeline: Retry settings (defaults used when omitted)
            client: Pre-built SDK client, mainly for tests

        Raises:
            ConfigurationError: If no API key is configured.
        """
        self.llm = llm
        self.pipeline = pipeline or PipelineConfig()

        if client is None:
            if not llm.api_key:
                raise ConfigurationError(
                    "No Anthropic API key provided. Set TAXI_LLM_API_KEY or "
                    "ANTHROPIC_API_KEY.",
                    config_key="TAXI_LLM_API_KEY",
                )
            client = anthropic.AsyncAnthropic(
                api_key=llm.api_key,
                max_retries=0,
                timeout=llm.request_timeout,
            )
        self.client = client

    async def generate(
        self,
        prompt: str,
        *,
        content: Optional[bytes] = None,
        mime_type: Optional[str] = None,
    ) -> str:
        """Send the prompt and inline content; return the response text."""
        blocks = build_content_blocks(prompt, content, mime_type)
        max_attempts = self.pipeline.max_attempts
        attempt = 0

        while True:
            attempt += 1
            try:
                response = await asyncio.wait_for(
                    self.client.messages.create(
                        model=self.llm.model,
                        max_tokens=self.llm.max_tokens,
                        temperature=self.llm.temperature,
                        messages=[{"role": "user", "content": blocks}],
                    ),
                    timeout=self.llm.request_timeout,
                )
            except CREDENTIAL_ERRORS as e:
                raise ConfigurationError(
                    f"Anthropic rejected the configured credentials: {e}",
                    config_key="TAXI_LLM_API_KEY",
                ) from e
            except RETRYABLE_ERRORS as e:
                reason = str(e) or f"request timed out after {self.llm.request_timeout:g}s"
                if attempt >= max_attempts:
                    raise GenerationError(
                        f"Generation failed after {attempt} attempts: {reason}",
                        api_error=reason,
                        attempts=attempt,
                    ) from e
                delay = self.pipeline.retry_delay * 2 ** (attempt - 1)
                logger.warning(
                    "generation_retry",
                    attempt=attempt,
                    delay=delay,
                    error=type(e).__name__,
                )
                await asyncio.sleep(delay)
                continue
            except anthropic.APIError as e:
                raise GenerationError(
                    f"Generation request failed: {e}",
                    api_error=str(e),
                    attempts=attempt,
                ) from e

            logger.debug(
                "generation_complete",
                model=self.llm.model,
                attempts=attempt,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
            )
            return "".join(
                block.text for block in response.content
                if getattr(block, "type", None) == "text"
            )
