"""
Classification client.

Sends an AnalysisPrompt to a hosted LLM and turns the reply into an
AnalysisResult. Two providers are supported:

  - gateway    OpenAI-compatible chat-completions endpoint, called with
               httpx. Accepts call recordings as an audio content part.
  - anthropic  Anthropic Messages API through the anthropic SDK. Text only.

Adding a new provider:
  1. Subclass Classifier and implement classify().
  2. Register a factory in _PROVIDERS.
  3. Set CLASSIFIER_PROVIDER=<provider> in the environment.

Upstream failures are never retried here. Rate limiting, exhausted credits
and any other upstream failure are raised as distinct errors so the caller
can decide what to do. A reply that arrives intact but cannot be parsed is
not an error: it is replaced by FALLBACK_RESULT.
"""

import json
import logging
from typing import Callable, Optional

import anthropic
import httpx
from pydantic import ValidationError as PydanticValidationError

from app.config import DEFAULT_GATEWAY_URL, DEFAULT_MODELS, DEFAULT_TIMEOUT_SECONDS, Settings
from app.errors import (
    UpstreamClassificationFailure,
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
)
from app.models.analysis import AnalysisPrompt, AnalysisResult, RiskLevel
from app.services.prompt_builder import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

# Bodies and replies are truncated to this many characters in logs
_LOG_SNIPPET_LENGTH = 500

ANTHROPIC_MAX_TOKENS = 1024

FALLBACK_RESULT = AnalysisResult(
    risk_level=RiskLevel.SUSPICIOUS,
    risk_score=0.5,
    flagged_reasons=["Unable to complete full analysis"],
    analysis="AI analysis could not be completed. Manual review recommended.",
    recommendations="Review this message carefully before taking any action.",
)


def fallback_result() -> AnalysisResult:
    return FALLBACK_RESULT.model_copy(deep=True)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------

def extract_json_text(reply: str) -> str:
    """
    Return the span from the first ``{`` to the last ``}`` in ``reply``.

    Models often wrap the JSON in prose or markdown fences; this keeps just
    the object. When there is no such span the whole reply is returned.
    """
    start = reply.find("{")
    end = reply.rfind("}")
    if start != -1 and end > start:
        return reply[start:end + 1]
    return reply


def parse_model_reply(reply: str) -> AnalysisResult:
    """
    Parse a model reply into an AnalysisResult.

    Never raises: invalid JSON or a payload that does not match the
    AnalysisResult schema yields the fallback verdict.
    """
    try:
        data = json.loads(extract_json_text(reply))
        return AnalysisResult.model_validate(data)
    except (ValueError, PydanticValidationError):
        logger.warning(
            "Failed to parse AI response, using fallback verdict: %r",
            reply[:_LOG_SNIPPET_LENGTH],
        )
        return fallback_result()


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------

class Classifier:
    """Interface implemented by every provider."""

    def classify(self, prompt: AnalysisPrompt) -> AnalysisResult:
        raise NotImplementedError


class GatewayClassifier(Classifier):
    """
    Classifier for an OpenAI-compatible chat-completions gateway.

    The cheaper text model handles emails, SMS and transcripts; the more
    capable audio model is used only when a recording is attached.
    """

    def __init__(
        self,
        api_key: Optional[str],
        url: str = DEFAULT_GATEWAY_URL,
        text_model: str = DEFAULT_MODELS["gateway"][0],
        audio_model: str = DEFAULT_MODELS["gateway"][1],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.text_model = text_model
        self.audio_model = audio_model
        self.timeout = timeout
        self._http_client = http_client

    def select_model(self, prompt: AnalysisPrompt) -> str:
        return self.audio_model if prompt.has_audio else self.text_model

    def build_payload(self, prompt: AnalysisPrompt) -> dict:
        if prompt.has_audio:
            user_content = [
                {"type": "text", "text": prompt.text},
                {"type": "audio", "audio": prompt.audio_data},
            ]
        else:
            user_content = prompt.text

        return {
            "model": self.select_model(prompt),
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_content},
            ],
        }

    def _post(self, payload: dict) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self._http_client is not None:
            return self._http_client.post(
                self.url, json=payload, headers=headers, timeout=self.timeout
            )
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.url, json=payload, headers=headers)

    def classify(self, prompt: AnalysisPrompt) -> AnalysisResult:
        if not self.api_key:
            raise UpstreamClassificationFailure(details="AI_GATEWAY_API_KEY is not configured")

        payload = self.build_payload(prompt)
        logger.info("Requesting classification from %s", payload["model"])

        try:
            response = self._post(payload)
        except httpx.TimeoutException:
            logger.error("AI gateway request timed out after %ss", self.timeout)
            raise UpstreamClassificationFailure(details="Classification request timed out")
        except httpx.HTTPError as exc:
            logger.error(f"AI gateway request failed: {exc}")
            raise UpstreamClassificationFailure(details="Classification service unreachable")

        if response.status_code == 429:
            logger.warning("AI gateway rate limit hit")
            raise UpstreamRateLimited()
        if response.status_code == 402:
            logger.warning("AI gateway credits exhausted")
            raise UpstreamQuotaExhausted()
        if not response.is_success:
            logger.error(
                "AI gateway error: %s %s",
                response.status_code,
                response.text[:_LOG_SNIPPET_LENGTH],
            )
            raise UpstreamClassificationFailure(
                details=f"Classification service returned HTTP {response.status_code}"
            )

        try:
            envelope = response.json()
        except ValueError:
            logger.error("AI gateway returned a non-JSON envelope: %r", response.text[:_LOG_SNIPPET_LENGTH])
            raise UpstreamClassificationFailure(details="Malformed response from classification service")

        content = _first_choice_content(envelope)
        if not content:
            logger.error("AI gateway envelope has no message content: %r", str(envelope)[:_LOG_SNIPPET_LENGTH])
            raise UpstreamClassificationFailure(details="No response from AI")

        return parse_model_reply(content)


def _first_choice_content(envelope) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a chat-completions envelope."""
    if not isinstance(envelope, dict):
        return None
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    # Some gateways return content as a list of typed parts
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") for part in content if isinstance(part, dict)
        )
    return content if isinstance(content, str) else None


class AnthropicClassifier(Classifier):
    """
    Classifier backed by the Anthropic Messages API.

    The Messages API has no audio input, so a prompt carrying a recording
    is rejected as an upstream failure instead of being silently analysed
    without its audio.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODELS["anthropic"][0],
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client=None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    def classify(self, prompt: AnalysisPrompt) -> AnalysisResult:
        if prompt.has_audio:
            raise UpstreamClassificationFailure(
                details="The configured classification provider does not accept audio recordings"
            )

        client = self._client or anthropic.Anthropic(api_key=self.api_key)
        logger.info("Requesting classification from %s", self.model)

        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=ANTHROPIC_MAX_TOKENS,
                timeout=self.timeout,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt.text}],
            )
        except anthropic.RateLimitError:
            logger.warning("Anthropic rate limit hit")
            raise UpstreamRateLimited()
        except anthropic.APIStatusError as exc:
            if exc.status_code == 402 or "credit balance" in str(exc).lower():
                logger.warning("Anthropic credits exhausted")
                raise UpstreamQuotaExhausted()
            logger.error("Anthropic API error: %s %s", exc.status_code, str(exc)[:_LOG_SNIPPET_LENGTH])
            raise UpstreamClassificationFailure(
                details=f"Classification service returned HTTP {exc.status_code}"
            )
        except anthropic.APIError as exc:
            logger.error(f"Anthropic request failed: {exc}")
            raise UpstreamClassificationFailure(details="Classification service unreachable")

        if not response.content:
            raise UpstreamClassificationFailure(details="No response from AI")

        return parse_model_reply(response.content[0].text)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def _build_gateway(settings: Settings) -> Classifier:
    return GatewayClassifier(
        api_key=settings.gateway_api_key,
        url=settings.gateway_url,
        text_model=settings.classifier_model,
        audio_model=settings.classifier_audio_model,
        timeout=settings.classifier_timeout,
    )


def _build_anthropic(settings: Settings) -> Classifier:
    return AnthropicClassifier(
        api_key=settings.anthropic_api_key,
        model=settings.classifier_model,
        timeout=settings.classifier_timeout,
    )


_PROVIDERS: dict[str, Callable[[Settings], Classifier]] = {
    "gateway": _build_gateway,
    "anthropic": _build_anthropic,
}


def build_classifier(settings: Settings) -> Classifier:
    """
    Build the classifier named by ``settings.classifier_provider``.

    Raises:
        ValueError: for an unknown provider.
    """
    factory = _PROVIDERS.get(settings.classifier_provider)
    if factory is None:
        raise ValueError(
            f"Unsupported classifier provider: {settings.classifier_provider!r}. "
            f"Supported: {sorted(_PROVIDERS)}"
        )
    return factory(settings)
