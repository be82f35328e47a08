"""
HTTP client for the generative-text collaborator.

Every public method is best effort: a missing API key, a network error, an
open circuit or an unreadable response all end in an empty result, never an
exception.
"""

import json
import logging
from typing import List

import requests

from tankerfleet.services.insights.models import DriverInsightsRequest, MonthlyReportRequest
from tankerfleet.utils.circuit_breaker import CircuitBreakerException, circuit_breaker

logger = logging.getLogger(__name__)

SERVICE_NAME = 'insights_api'

DRIVER_INSIGHTS_INSTRUCTIONS = (
    "You are an assistant for a water tanker business helping drivers reach higher monthly "
    "payout slabs. Using the driver data below, reply with JSON of the form "
    '{"insights": ["...", "..."]} containing short, actionable suggestions. If the driver is '
    "already in the highest slab, give encouragement and tips for keeping it up."
)

MONTHLY_SUMMARY_INSTRUCTIONS = (
    "You write short monthly performance summaries for a water tanker fleet owner. Using the "
    "data below, reply with JSON of the form {\"summary\": \"...\"} describing total trips, the "
    "slab achieved and the payout, compared with the previous month when it is given."
)


@circuit_breaker(SERVICE_NAME, exception_types=(requests.RequestException,))
def _post(url, params, body, timeout):
    response = requests.post(url, params=params, json=body, timeout=timeout)
    response.raise_for_status()
    return response.json()


def extract_text(payload) -> str:
    """Text of the first candidate in a generateContent response, or ""."""
    try:
        parts = payload['candidates'][0]['content']['parts']
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(part.get('text', '') for part in parts if isinstance(part, dict))


def parse_suggestions(text: str) -> List[str]:
    """Suggestion strings from a model reply; anything unreadable gives []."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return []
    if isinstance(data, dict):
        data = data.get('insights', data.get('aiInsights', []))
    if not isinstance(data, list):
        return []
    return [item.strip() for item in data if isinstance(item, str) and item.strip()]


def parse_summary(text: str) -> str:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return ""
    if isinstance(data, dict) and isinstance(data.get('summary'), str):
        return data['summary'].strip()
    return ""


class InsightsClient:
    def __init__(self, api_url, api_key, model, timeout=15):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_url=config.get('INSIGHTS_API_URL'),
            api_key=config.get('INSIGHTS_API_KEY'),
            model=config.get('INSIGHTS_MODEL'),
            timeout=config.get('INSIGHTS_TIMEOUT_SECONDS', 15),
        )

    @property
    def enabled(self):
        return bool(self.api_url and self.api_key)

    def _generate(self, instructions, data) -> str:
        if not self.enabled:
            logger.info("Insights API key not configured, skipping generation")
            return ""
        body = {
            'contents': [{'parts': [{'text': f"{instructions}\n\nData:\n{json.dumps(data, indent=2)}"}]}],
            'generationConfig': {'responseMimeType': 'application/json'},
        }
        try:
            payload = _post(self.api_url.format(model=self.model), {'key': self.api_key}, body, self.timeout)
        except CircuitBreakerException as e:
            logger.warning(f"Insights API skipped: {e}")
            return ""
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Insights API error: {e}", exc_info=True)
            return ""
        return extract_text(payload)

    def suggest(self, request: DriverInsightsRequest) -> List[str]:
        suggestions = parse_suggestions(self._generate(DRIVER_INSIGHTS_INSTRUCTIONS, request.model_dump()))
        logger.debug(f"Insights API returned {len(suggestions)} suggestions for driver {request.driver_id}")
        return suggestions

    def summarize(self, request: MonthlyReportRequest) -> str:
        return parse_summary(self._generate(MONTHLY_SUMMARY_INSTRUCTIONS, request.model_dump()))
