"""
Model Provider Adapters.

One plain function per backend, all with the same contract:

    extract_<provider>(client, images, api_key) -> ExtractionResult

and a dispatch table keyed by provider identifier. Adding a provider
means writing one function and adding one PROVIDERS entry.

Each adapter sends the fixed extraction prompt plus the page images in a
single blocking POST through an injected httpx.Client. The caller owns
the client and its timeouts; nothing here is cached at module level.

Usage:
    client = build_http_client()
    result = extract_with_provider("anthropic", pages, api_key, client)
"""

import base64
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx

from config import get_config
from docrecord.input_handler.loader import detect_media_type
from docrecord.utils.exceptions import ProviderError, TimeoutError, ValidationError
from docrecord.utils.logger import get_logger
from .extraction_result import ExtractionResult
from .normalizer import parse_extraction_response
from .prompt import EXTRACTION_SYSTEM_PROMPT

logger = get_logger(__name__)

ProviderFn = Callable[[httpx.Client, Sequence[bytes], str], ExtractionResult]

USER_INSTRUCTION = "Extract structured information from these document pages."


def build_http_client(timeout: Optional[float] = None, connect_timeout: Optional[float] = None) -> httpx.Client:
    """
    Create the HTTP client shared by all provider calls.

    Args:
        timeout: Read/write timeout in seconds. Defaults to
            providers.timeout_seconds.
        connect_timeout: Connect timeout in seconds. Defaults to
            providers.connect_timeout_seconds.

    Returns:
        Configured httpx.Client. The caller is responsible for closing it.
    """
    read_timeout = timeout if timeout is not None else get_config("providers.timeout_seconds", 60)
    conn_timeout = connect_timeout if connect_timeout is not None else get_config(
        "providers.connect_timeout_seconds", 10
    )
    return httpx.Client(
        timeout=httpx.Timeout(
            connect=float(conn_timeout),
            read=float(read_timeout),
            write=float(read_timeout),
            pool=float(conn_timeout),
        )
    )


def _encode_image(image: bytes) -> Dict[str, str]:
    return {
        'media_type': detect_media_type(image),
        'data': base64.b64encode(image).decode('ascii'),
    }


def _post_json(
    client: httpx.Client,
    provider: str,
    url: str,
    payload: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    Issue one POST and return the decoded JSON body.

    Raises:
        TimeoutError: The call exceeded the client's timeout.
        ProviderError: Transport failure, non-2xx status, or a body that
            is not a JSON object.
    """
    logger.debug(f"POST {url} ({provider})")
    try:
        response = client.post(url, json=payload, headers=headers, params=params)
    except httpx.TimeoutException as e:
        logger.error(f"{provider} request timed out: {e}")
        budget = client.timeout.read or get_config("providers.timeout_seconds", 60)
        raise TimeoutError(provider, budget) from e
    except httpx.HTTPError as e:
        logger.error(f"{provider} request failed: {e}")
        raise ProviderError(f"{provider} request failed: {e}", provider) from e

    logger.debug(f"{provider} responded with HTTP {response.status_code}")
    if not response.is_success:
        logger.error(f"{provider} extraction failed with HTTP {response.status_code}")
        raise ProviderError(
            f"{provider} extraction failed: HTTP {response.status_code}",
            provider,
            {"status_code": response.status_code, "body": response.text[:500]},
        )

    try:
        body = response.json()
    except ValueError as e:
        raise ProviderError(f"{provider} returned a non-JSON body", provider) from e
    if not isinstance(body, dict):
        raise ProviderError(f"{provider} returned an unexpected body", provider)
    return body


def _malformed_reply(provider: str, part: str) -> ProviderError:
    logger.error(f"{provider} reply has no usable {part}")
    return ProviderError(f"{provider} reply is malformed: missing or invalid {part}", provider)


def extract_openai(client: httpx.Client, images: Sequence[bytes], api_key: str) -> ExtractionResult:
    """Chat completions with image_url data URIs."""
    content: List[Dict[str, Any]] = [{'type': 'text', 'text': USER_INSTRUCTION}]
    for image in images:
        encoded = _encode_image(image)
        content.append({
            'type': 'image_url',
            'image_url': {'url': f"data:{encoded['media_type']};base64,{encoded['data']}"},
        })

    body = _post_json(
        client,
        "openai",
        get_config("providers.openai.endpoint", "https://api.openai.com/v1/chat/completions"),
        {
            'model': get_config("providers.openai.model", "gpt-4o"),
            'max_tokens': get_config("providers.max_tokens", 2048),
            'response_format': {'type': 'json_object'},
            'messages': [
                {'role': 'system', 'content': EXTRACTION_SYSTEM_PROMPT},
                {'role': 'user', 'content': content},
            ],
        },
        headers={'Authorization': f"Bearer {api_key}"},
    )

    choices = body.get('choices')
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise _malformed_reply("openai", "choices")
    message = choices[0].get('message')
    if not isinstance(message, dict):
        raise _malformed_reply("openai", "choices[0].message")
    text = message.get('content')
    if not isinstance(text, str):
        raise _malformed_reply("openai", "message content")
    return parse_extraction_response(text, "openai")


def extract_anthropic(client: httpx.Client, images: Sequence[bytes], api_key: str) -> ExtractionResult:
    """Messages API with base64 image blocks."""
    content: List[Dict[str, Any]] = [{'type': 'text', 'text': EXTRACTION_SYSTEM_PROMPT}]
    for image in images:
        encoded = _encode_image(image)
        content.append({
            'type': 'image',
            'source': {'type': 'base64', 'media_type': encoded['media_type'], 'data': encoded['data']},
        })

    body = _post_json(
        client,
        "anthropic",
        get_config("providers.anthropic.endpoint", "https://api.anthropic.com/v1/messages"),
        {
            'model': get_config("providers.anthropic.model", "claude-sonnet-4-20250514"),
            'max_tokens': get_config("providers.max_tokens", 2048),
            'messages': [{'role': 'user', 'content': content}],
        },
        headers={
            'x-api-key': api_key,
            'anthropic-version': get_config("providers.anthropic.api_version", "2023-06-01"),
        },
    )

    blocks = body.get('content')
    if not isinstance(blocks, list):
        raise _malformed_reply("anthropic", "content")
    text = "\n".join(
        block['text'] for block in blocks
        if isinstance(block, dict) and block.get('type') == 'text' and isinstance(block.get('text'), str)
    )
    return parse_extraction_response(text, "anthropic")


def extract_google(client: httpx.Client, images: Sequence[bytes], api_key: str) -> ExtractionResult:
    """generateContent with inline_data parts."""
    parts: List[Dict[str, Any]] = [{'text': EXTRACTION_SYSTEM_PROMPT}]
    for image in images:
        encoded = _encode_image(image)
        parts.append({'inline_data': {'mime_type': encoded['media_type'], 'data': encoded['data']}})

    endpoint = get_config("providers.google.endpoint", "https://generativelanguage.googleapis.com/v1beta/models")
    model = get_config("providers.google.model", "gemini-2.0-flash")
    body = _post_json(
        client,
        "google",
        f"{endpoint.rstrip('/')}/{model}:generateContent",
        {
            'generationConfig': {'temperature': 0, 'responseMimeType': 'application/json'},
            'contents': [{'role': 'user', 'parts': parts}],
        },
        params={'key': api_key},
    )

    candidates = body.get('candidates')
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        raise _malformed_reply("google", "candidates")
    content = candidates[0].get('content')
    if not isinstance(content, dict):
        raise _malformed_reply("google", "candidates[0].content")
    response_parts = content.get('parts')
    if not isinstance(response_parts, list):
        raise _malformed_reply("google", "content parts")
    text = "\n".join(
        part['text'] for part in response_parts
        if isinstance(part, dict) and isinstance(part.get('text'), str)
    )
    return parse_extraction_response(text, "google")


PROVIDERS: Dict[str, ProviderFn] = {
    'openai': extract_openai,
    'anthropic': extract_anthropic,
    'google': extract_google,
}


def extract_with_provider(
    provider_id: str,
    images: Sequence[bytes],
    api_key: str,
    client: httpx.Client,
) -> ExtractionResult:
    """
    Dispatch an extraction to the named provider.

    Args:
        provider_id: One of the PROVIDERS keys.
        images: Page bytes, in page order.
        api_key: Resolved provider API key.
        client: HTTP client to issue the call with.

    Returns:
        Normalized ExtractionResult.

    Raises:
        ValidationError: Unknown provider or empty API key.
        ProviderError: The provider call or its response failed.
        TimeoutError: The provider did not answer in time.
    """
    extractor = PROVIDERS.get(provider_id)
    if extractor is None:
        raise ValidationError(
            f"Unsupported provider: {provider_id}",
            {"supported": sorted(PROVIDERS)}
        )
    if not api_key:
        raise ValidationError(f"Missing API key for provider {provider_id}")

    logger.info(f"Extracting {len(images)} page(s) with {provider_id}")
    return extractor(client, images, api_key)
