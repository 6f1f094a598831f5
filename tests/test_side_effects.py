import asyncio
import json

import httpx
import pytest

from qadesk.core.config import settings
from qadesk.services.best_effort import run_best_effort
from qadesk.services.email import EmailType, build_notification, send_email
from qadesk.services.tagging import MAX_TAGS, generate_tags, parse_tags


# ============================================================================
# BEST EFFORT
# ============================================================================


def test_best_effort_returns_result():
    async def ok():
        return 42

    assert asyncio.run(run_best_effort(ok(), "answer")) == 42


def test_best_effort_swallows_failure_and_returns_default():
    async def boom():
        raise RuntimeError("smtp down")

    assert asyncio.run(run_best_effort(boom(), "email", default=[])) == []


def test_best_effort_times_out():
    async def slow():
        await asyncio.sleep(5)
        return "late"

    assert asyncio.run(run_best_effort(slow(), "tagging", default="fallback", timeout=0.01)) == "fallback"


# ============================================================================
# EMAIL
# ============================================================================


def test_send_email_without_smtp_raises():
    with pytest.raises(ValueError):
        asyncio.run(send_email("someone@example.com", "subject", "<p>hi</p>", "hi"))


def test_build_notification_links_to_question():
    subject, html, text = build_notification(
        EmailType.ANSWER_POSTED, 7, "Cannot connect to VPN", "admin"
    )
    assert "Cannot connect to VPN" in subject
    assert "http://localhost:3000/questions/7" in text
    assert "http://localhost:3000/questions/7" in html
    assert "admin answered your question." in text


def test_build_notification_escapes_title_in_html():
    _, html, text = build_notification(
        EmailType.QUESTION_POSTED, 3, "<script>alert(1)</script>", "alice"
    )
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<script>alert(1)</script>" in text


# ============================================================================
# TAGGING
# ============================================================================


def test_parse_tags_normalizes_and_caps():
    raw = json.dumps({"tags": ["Python", "python", " FastAPI ", "", 3, "sql", "docker", "k8s", "git"]})
    tags = parse_tags(raw)
    assert tags == ["python", "fastapi", "sql", "docker", "k8s"]
    assert len(tags) == MAX_TAGS


def test_parse_tags_rejects_invalid_json():
    with pytest.raises(ValueError):
        parse_tags("tags: python")


def test_parse_tags_rejects_non_list_tags():
    with pytest.raises(ValueError):
        parse_tags(json.dumps({"tags": "python"}))


def test_generate_tags_not_configured():
    assert asyncio.run(generate_tags("title", "content")) == []


def test_generate_tags_calls_deployment(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["api_key"] = request.headers["api-key"]
        reply = {"tags": ["Networking", "vpn"], "confidence": 0.9}
        return httpx.Response(200, json={"choices": [{"message": {"content": json.dumps(reply)}}]})

    real_client = httpx.AsyncClient
    monkeypatch.setattr(settings, "azure_openai_endpoint", "https://tags.example.com/")
    monkeypatch.setattr(settings, "azure_openai_api_key", "secret")
    monkeypatch.setattr(
        httpx, "AsyncClient", lambda **kwargs: real_client(transport=httpx.MockTransport(handler))
    )

    tags = asyncio.run(generate_tags("VPN drops", "The VPN disconnects every hour"))

    assert tags == ["networking", "vpn"]
    assert seen["url"].startswith("https://tags.example.com/openai/deployments/gpt-4/chat/completions")
    assert "api-version=2024-10-21" in seen["url"]
    assert seen["api_key"] == "secret"


def test_generate_tags_http_error(monkeypatch):
    real_client = httpx.AsyncClient
    monkeypatch.setattr(settings, "azure_openai_endpoint", "https://tags.example.com")
    monkeypatch.setattr(settings, "azure_openai_api_key", "secret")
    monkeypatch.setattr(
        httpx,
        "AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(lambda r: httpx.Response(503))),
    )
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(generate_tags("title", "content"))
