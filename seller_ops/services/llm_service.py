import json
import logging
from urllib import error, request
from urllib.parse import urlparse

from seller_ops.config import get_settings

logger = logging.getLogger(__name__)

_ALLOWED_HTTP_SCHEMES = {"http", "https"}


def _validate_api_url(api_url):
    parsed = urlparse(api_url)
    scheme = parsed.scheme.lower()
    if scheme not in _ALLOWED_HTTP_SCHEMES or not parsed.netloc:
        raise RuntimeError("LLM_API_URL must be an absolute HTTP(S) URL")
    return api_url


def validate_api_url(api_url):
    return _validate_api_url(api_url)


def build_payload(model, system_prompt, user_prompt, *, temperature, max_tokens):
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }


def extract_content(body):
    try:
        choices = body.get("choices") or []
        content = choices[0]["message"]["content"] if choices else None
    except (AttributeError, KeyError, IndexError, TypeError):
        content = None
    if content is None or not str(content).strip():
        raise RuntimeError("LLM API returned an empty completion")
    return str(content).strip()


def _raise_http_error(exc):
    body = ""
    try:
        body_bytes = exc.read()
        if body_bytes:
            body = body_bytes.decode("utf-8", errors="replace").strip()
    except (OSError, ValueError):
        body = ""

    if body:
        raise RuntimeError("LLM API error: HTTP {} {}".format(exc.code, body)) from exc
    raise RuntimeError("LLM API error: HTTP {}".format(exc.code)) from exc


def complete_chat(system_prompt, user_prompt, *, temperature=0.5, max_tokens=300):
    settings = get_settings()

    api_url = (settings.LLM_API_URL or "").strip()
    api_key = (settings.LLM_API_KEY or "").strip()
    if not api_url:
        raise RuntimeError("LLM_API_URL is not configured")
    if not api_key:
        raise RuntimeError("LLM_API_KEY is not configured")
    api_url = _validate_api_url(api_url)

    if not system_prompt or not user_prompt:
        raise ValueError("system and user prompts are required")

    payload = build_payload(
        settings.LLM_MODEL,
        system_prompt,
        user_prompt,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    if api_key.lower().startswith("bearer "):
        auth_header = api_key
    else:
        auth_header = "Bearer {}".format(api_key)

    req = request.Request(
        api_url,
        data=json.dumps(payload).encode("utf-8"),
        method="POST",
        headers={
            "Content-Type": "application/json",
            "Authorization": auth_header,
            "HTTP-Referer": settings.SITE_URL,
            "X-Title": settings.LLM_APP_TITLE,
        },
    )

    logger.info("Requesting completion from %s (model %s)", urlparse(api_url).netloc, settings.LLM_MODEL)
    try:
        with request.urlopen(req, timeout=settings.LLM_TIMEOUT_SECONDS) as response:  # nosec B310
            status_code = response.getcode()
            if status_code < 200 or status_code >= 300:
                raise RuntimeError("LLM API error: HTTP {}".format(status_code))
            raw = response.read()
    except error.HTTPError as exc:
        _raise_http_error(exc)
    except error.URLError as exc:
        raise RuntimeError("LLM API error: {}".format(exc.reason)) from exc

    try:
        body = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise RuntimeError("LLM API returned invalid JSON") from exc
    return extract_content(body)
