import asyncio
import json
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from mailpulse.config import MailPulseConfig
from mailpulse.lib.shared.errors import ConfigurationError, MailPulseError, ResponseFormatError, TransportError
from mailpulse.lib.shared.models.analysis import REQUIRED_KEYS, AnalysisResult, Classification, Sentiment
from .helpers import strip_code_fences
from .prompts import build_analysis_prompt

logger = logging.getLogger(__name__)

CLASSIFICATION_VALUES = frozenset(c.value for c in Classification)
SENTIMENT_VALUES = frozenset(s.value for s in Sentiment)

def parse_analysis(text: Optional[str], strict: bool = False) -> AnalysisResult:
    """
    Turns raw model text into the analysis object.

    Raises:
        ResponseFormatError: the text is not a JSON object, a required key is
        missing or empty, or (strict only) a label is outside the known sets.
    """
    cleaned = strip_code_fences(text or "")
    try:
        analysis = json.loads(cleaned)
    except (json.JSONDecodeError, RecursionError) as e:
        # Very deep nesting exhausts the decoder before it can report a syntax error
        logger.error("Gemini raw response text: %r", text)
        logger.error("Received text was: %r", cleaned)
        raise ResponseFormatError(f"Malformed response, not valid JSON: {e}") from e

    if not isinstance(analysis, dict):
        logger.error("Parsed value: %r", analysis)
        raise ResponseFormatError(f"Malformed response, expected a JSON object, got {type(analysis).__name__}")

    missing = [key for key in REQUIRED_KEYS if not analysis.get(key)]
    if missing:
        logger.error("Parsed object: %r", analysis)
        raise ResponseFormatError(f"Incomplete response, missing expected keys: {', '.join(missing)}")

    if strict:
        _check_labels(analysis)
    return analysis

def _check_labels(analysis: AnalysisResult) -> None:
    classification = analysis["classification"]
    sentiment = analysis["sentiment"]
    if not isinstance(classification, str) or classification not in CLASSIFICATION_VALUES:
        raise ResponseFormatError(f"Unknown classification {classification!r}")
    if not isinstance(sentiment, str) or sentiment not in SENTIMENT_VALUES:
        raise ResponseFormatError(f"Unknown sentiment {sentiment!r}")

class EmailAnalyzer:
    """
    Classifies an email and rates its sentiment with Gemini.

    Every failure (no API key, network error, timeout, unparseable or
    incomplete output) resolves to None; the log says which one it was.
    """
    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash", timeout: float = 30.0, strict: bool = False, client: Any = None):
        self.model = model
        self.timeout = timeout
        self.strict = strict
        self.client = client
        if self.client is None and api_key:
            try:
                self.client = genai.Client(api_key=api_key)
                logger.info("Gemini client initialized (model=%s).", model)
            except Exception as e:
                logger.error("Failed to initialize Gemini client: %s", e)
        elif self.client is None:
            logger.warning("Gemini service started without an API key. Analysis will fail.")

    @classmethod
    def from_config(cls, config: MailPulseConfig) -> "EmailAnalyzer":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            timeout=config.gemini_timeout,
            strict=config.strict_labels,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def analyze(self, subject: str, body: str) -> Optional[AnalysisResult]:
        try:
            if not self.is_configured:
                raise ConfigurationError("Gemini model is not available")
            logger.info("Analyzing email with Gemini... Subject: %s", subject)
            text = await self._generate(build_analysis_prompt(subject, body))
            logger.debug("Gemini raw response text: %r", text)
            analysis = parse_analysis(text, strict=self.strict)
        except ResponseFormatError as e:
            logger.error("Error parsing JSON response from Gemini: %s", e)
            return None
        except MailPulseError as e:
            logger.error("Cannot analyze email: %s", e)
            return None

        logger.info("Gemini analysis parsed: %s", analysis)
        return analysis

    async def _generate(self, prompt: str) -> Optional[str]:
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=types.GenerateContentConfig(temperature=0.0),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(f"Gemini call timed out after {self.timeout}s") from e
        except Exception as e:
            if "404" in str(e) and "models/" in str(e):
                logger.warning("Tip: Try setting GEMINI_MODEL='gemini-2.5-flash' in your .env file.")
            raise TransportError(f"Error calling Gemini API: {e}") from e
        return response.text
