"""
Tests for the advisory text client. The Gemini endpoint is never contacted,
requests.post is replaced with a fake for every test.
"""
import json
import math
import threading

import pytest
import requests

from solarcalc import advisor
from solarcalc.advisor import (
    FALLBACK_ADVICE,
    Advice,
    AdviceSlot,
    build_prompt,
    build_request_body,
    get_advice,
    parse_advice,
    request_advice,
)
from solarcalc.calculator import CalculationInput, calculate_solar_metrics
from solarcalc.constants import PanelType


GOOD_ADVICE = {
    "summary": "A 3 kW system pays for itself in about a year.",
    "benefits": ["Net metering credits", "PM Surya Ghar subsidy", "Lower summer bills"],
    "recommendations": "Go with DCR panels.",
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def inputs():
    return CalculationInput(
        monthly_consumption_kwh=300,
        sun_hours_per_day=5.0,
        electricity_rate_per_kwh=8.50,
        state="Uttar Pradesh",
        panel_type=PanelType.DCR_PANELS,
    )


@pytest.fixture
def result(inputs):
    return calculate_solar_metrics(inputs)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def fake_post(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def post(url, **kwargs):
            calls.append((url, kwargs))
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(advisor.requests, "post", post)
        return calls

    return install


class TestPrompt:
    def test_embeds_inputs_and_figures(self, inputs, result):
        prompt = build_prompt(inputs, result)
        assert "Uttar Pradesh" in prompt
        assert "300 units" in prompt
        assert "3 kW" in prompt
        assert "DCR_PANELS" in prompt
        assert "₹141000" in prompt
        assert "₹78000" in prompt
        assert "₹30000" in prompt
        assert "₹33000" in prompt
        assert "1.1 years" in prompt

    def test_infinite_payback(self, result, inputs):
        no_savings = result.__class__(**{**result.to_dict(), "payback_period": math.inf})
        assert "N/A" in build_prompt(inputs, no_savings)

    def test_request_body_asks_for_json(self):
        body = build_request_body("hello")
        assert body["contents"][0]["parts"][0]["text"] == "hello"
        config = body["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        assert config["responseSchema"]["required"] == ["summary", "benefits", "recommendations"]


class TestParseAdvice:
    def test_valid(self):
        advice = parse_advice(GOOD_ADVICE)
        assert advice.summary.startswith("A 3 kW")
        assert advice.benefits == tuple(GOOD_ADVICE["benefits"])

    def test_singular_recommendation_key(self):
        payload = dict(GOOD_ADVICE)
        payload["recommendation"] = payload.pop("recommendations")
        assert parse_advice(payload).recommendations == "Go with DCR panels."

    @pytest.mark.parametrize("payload", [
        [],
        {"summary": "x", "benefits": "not a list", "recommendations": "y"},
        {"summary": "", "benefits": [], "recommendations": "y"},
        {"summary": "x", "benefits": [1, 2], "recommendations": "y"},
        {"summary": "x", "benefits": []},
    ])
    def test_invalid(self, payload):
        with pytest.raises(ValueError):
            parse_advice(payload)


class TestGetAdvice:
    def test_success(self, fake_post, inputs, result):
        calls = fake_post(FakeResponse(gemini_payload(json.dumps(GOOD_ADVICE))))
        advice = get_advice(inputs, result, api_key="secret", model="gemini-test")

        assert advice == parse_advice(GOOD_ADVICE)
        url, kwargs = calls[0]
        assert url.endswith("/models/gemini-test:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "secret"
        assert "timeout" in kwargs

    def test_key_from_environment(self, monkeypatch, fake_post, inputs, result):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        calls = fake_post(FakeResponse(gemini_payload(json.dumps(GOOD_ADVICE))))
        get_advice(inputs, result)
        assert calls[0][1]["headers"]["x-goog-api-key"] == "from-env"

    def test_no_key_skips_request(self, fake_post, inputs, result):
        calls = fake_post(FakeResponse(gemini_payload(json.dumps(GOOD_ADVICE))))
        assert get_advice(inputs, result) is FALLBACK_ADVICE
        assert calls == []

    @pytest.mark.parametrize("response, exc", [
        (None, requests.ConnectionError("offline")),
        (None, requests.Timeout("slow")),
        (FakeResponse(status_code=500), None),
        (FakeResponse(payload=None), None),
        (FakeResponse({"candidates": []}), None),
        (FakeResponse(gemini_payload("not json")), None),
        (FakeResponse(gemini_payload(json.dumps({"summary": "only"}))), None),
    ])
    def test_failures_fall_back(self, fake_post, inputs, result, response, exc):
        fake_post(response, exc)
        assert get_advice(inputs, result, api_key="secret") is FALLBACK_ADVICE

    def test_does_not_touch_result(self, fake_post, inputs, result):
        before = result.to_dict()
        fake_post(FakeResponse(gemini_payload(json.dumps(GOOD_ADVICE))))
        get_advice(inputs, result, api_key="secret")
        assert result.to_dict() == before

    def test_fallback_shape(self):
        assert isinstance(FALLBACK_ADVICE, Advice)
        assert len(FALLBACK_ADVICE.benefits) == 3


class TestAdviceSlot:
    def test_latest_generation_wins(self):
        slot = AdviceSlot()
        first = slot.begin()
        second = slot.begin()

        assert slot.publish(first, FALLBACK_ADVICE) is False
        assert slot.current is None
        assert slot.publish(second, FALLBACK_ADVICE) is True
        assert slot.current is FALLBACK_ADVICE

    def test_begin_clears_previous_advice(self):
        slot = AdviceSlot()
        first = slot.begin()
        assert slot.publish(first, FALLBACK_ADVICE) is True
        token = slot.begin()
        assert slot.current is None
        # the earlier token can no longer publish, the new one can
        assert slot.publish(first, FALLBACK_ADVICE) is False
        assert slot.current is None
        assert slot.publish(token, FALLBACK_ADVICE) is True

    def test_request_advice_publishes(self, inputs, result):
        slot = AdviceSlot()
        advice = request_advice(slot, inputs, result)
        assert advice is FALLBACK_ADVICE
        assert slot.current is FALLBACK_ADVICE

    def test_stale_response_is_dropped(self, monkeypatch, inputs, result):
        slot = AdviceSlot()
        started = threading.Event()
        release = threading.Event()
        newer = Advice(summary="newer", benefits=(), recommendations="")

        def slow_advice(*args, **kwargs):
            started.set()
            release.wait(5)
            return FALLBACK_ADVICE

        monkeypatch.setattr(advisor, "get_advice", slow_advice)
        outcome = {}
        worker = threading.Thread(
            target=lambda: outcome.update(value=request_advice(slot, inputs, result)))
        worker.start()
        started.wait(5)

        # a newer calculation starts while the first request is in flight
        assert slot.publish(slot.begin(), newer)
        release.set()
        worker.join(5)

        assert outcome["value"] is None
        assert slot.current is newer
