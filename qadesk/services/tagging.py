"""AI tag generation through an Azure OpenAI chat-completions deployment."""

import json
import logging

import httpx

from qadesk.core.config import settings

logger = logging.getLogger(__name__)

MAX_TAGS = 5

PROMPT_TEMPLATE = """Based on the following question title and content, generate up to {max_tags} relevant technical tags. Focus on technologies, programming languages, frameworks, and concepts mentioned.

Title: {title}
Content: {content}

Respond with only a JSON object in this format:
{{"tags": ["tag1", "tag2", "tag3"], "confidence": 0.95}}

Tags should be lowercase and use common technical terms."""


def parse_tags(raw: str) -> list[str]:
    """
    Extract tags from the model's JSON reply.

    Raises:
        ValueError: If the reply is not a JSON object with a list of tags.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid response format from OpenAI: {e}") from e

    if not isinstance(parsed, dict) or not isinstance(parsed.get("tags", []), list):
        raise ValueError("Invalid response format from OpenAI: 'tags' must be a list")

    tags: list[str] = []
    for tag in parsed.get("tags", []):
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in tags:
            tags.append(cleaned)
    return tags[:MAX_TAGS]


async def generate_tags(title: str, content: str) -> list[str]:
    """
    Ask the configured deployment for up to five tags.

    Returns an empty list without calling out when tagging is not configured.

    Raises:
        ValueError: If the reply is malformed.
        httpx.HTTPError: If the request fails.
    """
    if not settings.azure_openai_endpoint or not settings.azure_openai_api_key:
        logger.debug("Azure OpenAI is not configured, skipping tag generation")
        return []

    url = (
        f"{settings.azure_openai_endpoint.rstrip('/')}/openai/deployments/"
        f"{settings.azure_openai_deployment}/chat/completions"
    )
    request_body = {
        "messages": [
            {
                "role": "user",
                "content": PROMPT_TEMPLATE.format(
                    max_tags=MAX_TAGS, title=title, content=content
                ),
            }
        ],
        "temperature": 0.3,
        "max_tokens": 200,
    }

    async with httpx.AsyncClient() as client:
        response = await client.post(
            url,
            params={"api-version": settings.azure_openai_api_version},
            json=request_body,
            headers={"api-key": settings.azure_openai_api_key},
            timeout=settings.side_effect_timeout_seconds,
        )
        response.raise_for_status()
        api_response = response.json()

    choices = api_response.get("choices") if isinstance(api_response, dict) else None
    if not choices:
        raise ValueError("No response content from OpenAI")
    message_content = (choices[0].get("message") or {}).get("content")
    if not message_content:
        raise ValueError("No response content from OpenAI")

    tags = parse_tags(message_content)
    logger.debug("Generated tags %s for question '%s'", tags, title)
    return tags
