from __future__ import annotations

import pytest

SOURCE = "AI เป็นเทคโนโลยีที่ช่วยให้เราเรียนรู้สายพันธุ์นกและแหล่งน้ำที่นกอาศัยอยู่"


def chat_completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_summarize_success(client, upstream):
    upstream.respond(
        200,
        json_body=chat_completion(
            'ผลลัพธ์: {"summary": "AI ช่วยเรียนรู้นก", "keywords": ["AI", "นก", "น้ำ"]}'
        ),
    )

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 200
    assert r.json() == {
        "summary": "AI ช่วยเรียนรู้นก",
        "keywords": ["AI", "นก", "น้ำ"],
        "originalText": SOURCE,
    }


def test_request_shape(client, upstream):
    upstream.respond(200, json_body=chat_completion('{"summary": "s", "keywords": []}'))

    client.post("/v1/summarize-text", json={"text": SOURCE})

    assert len(upstream.calls) == 1
    sent = upstream.calls[0]
    assert sent.url == "https://api.opentyphoon.ai/v1/chat/completions"
    assert sent.headers["authorization"] == "Bearer typhoon-test"

    body = upstream.last_json()
    assert body["model"] == "typhoon-v2.1-12b-instruct"
    assert body["max_tokens"] == 2048
    assert body["temperature"] == 0.2
    assert body["messages"][0]["role"] == "system"
    assert body["messages"][1]["content"].endswith(SOURCE)


@pytest.mark.parametrize("payload", [{"text": ""}, {"text": "   \n\t "}, {}, {"text": None}])
def test_empty_text_is_rejected_without_upstream_call(client, upstream, payload):
    r = client.post("/v1/summarize-text", json=payload)

    assert r.status_code == 400
    assert r.json() == {"error": "No text provided"}
    assert upstream.calls == []


def test_unparseable_reply_degrades_to_raw_summary(client, upstream):
    reply = "ขออภัย ไม่สามารถสรุปเป็น JSON ได้ " * 20
    upstream.respond(200, json_body=chat_completion(reply))

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 200
    assert r.json() == {"summary": reply[:200], "keywords": [], "originalText": SOURCE}


def test_missing_fields_are_defaulted(client, upstream):
    upstream.respond(200, json_body=chat_completion('{"keywords": ["นก"]}'))

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 200
    assert r.json() == {"summary": "", "keywords": ["นก"], "originalText": SOURCE}


def test_missing_api_key_fails_before_network(client, upstream, settings):
    settings.TYPHOON_API_KEY = ""

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 500
    assert r.json() == {"error": "TYPHOON_API_KEY is not configured"}
    assert upstream.calls == []


def test_upstream_error_status_is_structured(client, upstream):
    upstream.respond(503, text="overloaded")

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 500
    assert "503" in r.json()["error"]


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {}}]},
        {"id": "x"},
    ],
)
def test_empty_completion_is_an_upstream_error(client, upstream, body):
    upstream.respond(200, json_body=body)

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 500
    assert r.json() == {"error": "No content in TYPHOON API response"}


def test_non_json_upstream_body_is_an_upstream_error(client, upstream):
    upstream.respond(200, text="<html>gateway</html>")

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 500
    assert "non-JSON" in r.json()["error"]


def test_upstream_error_body_is_not_passed_to_caller(client, upstream):
    upstream.respond(401, text="Incorrect API key provided: typh***test. secret-detail")

    r = client.post("/v1/summarize-text", json={"text": SOURCE})

    assert r.status_code == 500
    assert r.json() == {"error": "TYPHOON API error: 401"}
