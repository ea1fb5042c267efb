# -*- coding: utf-8 -*-
"""
Advisory text for a computed solar quote

Asks the Gemini text generation API for a short consultant style summary of
an already computed CalculationResult. The model only writes prose: numbers
always come from the calculator. Any failure falls back to static advice with
the same shape so the page never has to branch on success.
"""
import json
import logging
import math
import os
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

import requests

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TIMEOUT = 30  # seconds

CONSULTANT_NAME = "Parth solar solutions"

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "benefits": {"type": "ARRAY", "items": {"type": "STRING"}},
        "recommendations": {"type": "STRING"},
    },
    "required": ["summary", "benefits", "recommendations"],
}


@dataclass(frozen=True)
class Advice:
    summary: str
    benefits: Tuple[str, ...]
    recommendations: str


FALLBACK_ADVICE = Advice(
    summary=(
        "Parth solar solutions highly recommends solar for your location "
        "under the PM Surya Ghar scheme."
    ),
    benefits=(
        "Eliminate up to 300 units of monthly billing",
        "Fastest ROI with current Indian subsidies",
        "Reliable energy during peak Indian summer",
    ),
    recommendations=(
        "We recommend DCR panels for full subsidy eligibility and long-term "
        "durability in local weather."
    ),
)


def resolve_api_key(api_key=None):
    """Explicit key first, then the GEMINI_API_KEY and API_KEY environment variables"""
    return api_key or os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


def build_prompt(inputs, result):
    """Natural language prompt embedding the input and the computed figures"""
    if math.isfinite(result.payback_period):
        payback = f"{result.payback_period:.1f} years"
    else:
        payback = "N/A (no bill savings)"

    return (
        f'As a solar energy consultant from "{CONSULTANT_NAME}", analyze this installation '
        f"for a customer in {inputs.state}:\n"
        f"  Monthly Bill: {inputs.monthly_consumption_kwh:g} units\n"
        f"  System Size: {result.required_kw:g} kW\n"
        f"  Panel Type: {inputs.panel_type.value}\n"
        f"  Estimated Total Cost: ₹{result.estimated_cost:.0f}\n"
        f"  Central Subsidy (PM Surya Ghar): ₹{result.central_subsidy:.0f}\n"
        f"  State Subsidy: ₹{result.state_subsidy:.0f}\n"
        f"  Net Investment: ₹{result.final_cost:.0f}\n"
        f"  Payback: {payback}\n\n"
        "Provide a concise summary, 3 key benefits (mentioning Net Metering or specific "
        f"Indian policies), and a recommendation for {inputs.state} conditions. "
        "Maintain a professional yet encouraging tone."
    )


def build_request_body(prompt):
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def parse_advice(payload):
    """
    Validate a decoded JSON object against the advice shape

    Raises ValueError when a field is missing or has the wrong type.
    """
    if not isinstance(payload, dict):
        raise ValueError("advice payload is not an object")

    summary = payload.get("summary")
    benefits = payload.get("benefits")
    # Some responses use the singular key
    recommendations = payload.get("recommendations", payload.get("recommendation"))

    if not isinstance(summary, str) or not summary.strip():
        raise ValueError("advice summary missing")
    if not isinstance(benefits, list) or not all(isinstance(b, str) for b in benefits):
        raise ValueError("advice benefits must be a list of strings")
    if not isinstance(recommendations, str):
        raise ValueError("advice recommendations missing")

    return Advice(
        summary=summary.strip(),
        benefits=tuple(b.strip() for b in benefits if b.strip()),
        recommendations=recommendations.strip(),
    )


def extract_text(response_json):
    """Pull the generated text out of a generateContent response"""
    return response_json["candidates"][0]["content"]["parts"][0]["text"]


def get_advice(inputs, result, api_key=None, model=DEFAULT_MODEL, timeout=DEFAULT_TIMEOUT):
    """
    Request advisory prose for a computed result

    Parameters:
    -----------
    inputs : CalculationInput
        The household inputs the result was computed from
    result : CalculationResult
        Already computed figures, passed through untouched
    api_key : str, optional
        Gemini API key. Falls back to the environment when omitted.
    model : str
        Gemini model name
    timeout : float
        Transport timeout in seconds

    Returns:
    --------
    Advice
        Generated advice, or FALLBACK_ADVICE on any failure
    """
    key = resolve_api_key(api_key)
    if not key:
        logger.info("No Gemini API key configured, using fallback advice")
        return FALLBACK_ADVICE

    try:
        response = requests.post(
            GEMINI_URL.format(model=model),
            headers={"x-goog-api-key": key, "Content-Type": "application/json"},
            json=build_request_body(build_prompt(inputs, result)),
            timeout=timeout,
        )
        response.raise_for_status()
        return parse_advice(json.loads(extract_text(response.json())))
    except requests.RequestException as e:
        logger.warning("AI advice request failed: %s", e)
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.warning("AI advice response could not be parsed: %s", e)
    return FALLBACK_ADVICE


class AdviceSlot:
    """
    Holds the advice for the most recent calculation

    Every calculation takes a new generation token with begin(). Advice that
    arrives for an older token is dropped, so a slow response can never
    overwrite the advice for a newer calculation.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0
        self._advice = None

    @property
    def current(self) -> Optional[Advice]:
        return self._advice

    def begin(self):
        with self._lock:
            self._generation += 1
            self._advice = None
            return self._generation

    def publish(self, token, advice):
        with self._lock:
            if token != self._generation:
                logger.debug("Dropping stale advice for generation %d (current %d)",
                             token, self._generation)
                return False
            self._advice = advice
            return True


def request_advice(slot, inputs, result, **kwargs):
    """Fetch advice for a new calculation and store it if still current"""
    token = slot.begin()
    advice = get_advice(inputs, result, **kwargs)
    if slot.publish(token, advice):
        return advice
    return None
