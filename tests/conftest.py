import pytest

from mailpulse.lib.shared.llm.analysis_service import EmailAnalyzer
from mailpulse.mocks.email import DummyEmailFetcher
from mailpulse.services.auth.flow import AuthFlow
from mailpulse.services.auth.store import CredentialStore
from mailpulse.services.email.fetcher import EmailFetcher
from mailpulse.services.pipeline import AnalysisPipeline
from tests.factories import SALES_RESPONSE, get_client_config, get_gemini_client

ENV_KEYS = (
    "GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REDIRECT_URI",
    "GEMINI_API_KEY", "GEMINI_MODEL", "USE_MOCK_DATA", "ANALYSIS_STRICT_LABELS",
    "PORT", "LOG_LEVEL", "OAUTH_TIMEOUT_SECONDS", "GMAIL_TIMEOUT_SECONDS", "GEMINI_TIMEOUT_SECONDS",
)

@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Force the test environment and start every test from a blank configuration."""
    monkeypatch.setenv("MAILPULSE_ENV", "test")
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

@pytest.fixture
def client_config():
    return get_client_config()

@pytest.fixture
def store(client_config):
    return CredentialStore(client_config)

@pytest.fixture
def auth_flow(client_config, store):
    return AuthFlow(client_config, store, timeout=1.0)

@pytest.fixture
def email_fetcher(client_config, store):
    return EmailFetcher(client_config, store, DummyEmailFetcher(), timeout=1.0)

@pytest.fixture
def gemini_client():
    return get_gemini_client(SALES_RESPONSE)

@pytest.fixture
def analyzer(gemini_client):
    return EmailAnalyzer(api_key=None, timeout=1.0, client=gemini_client)

@pytest.fixture
def pipeline(auth_flow, email_fetcher, analyzer, store):
    return AnalysisPipeline(auth_flow, email_fetcher, analyzer, store)
