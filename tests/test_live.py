import os
from datetime import datetime

import pytest

from mailpulse.config import OAuthClientConfig
from mailpulse.lib.shared.llm.analysis_service import EmailAnalyzer
from mailpulse.lib.shared.models.auth import Credential
from mailpulse.services.auth.store import CredentialStore
from mailpulse.services.email.fetcher import EmailFetcher
from mailpulse.services.email.providers.gmail import GmailService

pytestmark = pytest.mark.integration

# Separate variable names: the autouse test_env fixture blanks the regular ones
LIVE_GEMINI_API_KEY = os.getenv("LIVE_GEMINI_API_KEY")
LIVE_GOOGLE_ENV = ("LIVE_GOOGLE_CLIENT_ID", "LIVE_GOOGLE_CLIENT_SECRET", "LIVE_GOOGLE_REFRESH_TOKEN")

@pytest.mark.asyncio
async def test_live_gemini_sales_inquiry():
    """
    Prerequisites: LIVE_GEMINI_API_KEY set to a key with access to the configured model.
    """
    if not LIVE_GEMINI_API_KEY:
        pytest.skip("Skipping live test: LIVE_GEMINI_API_KEY not set")

    analyzer = EmailAnalyzer(api_key=LIVE_GEMINI_API_KEY, model=os.getenv("LIVE_GEMINI_MODEL", "gemini-2.5-flash"))
    result = await analyzer.analyze(
        "Inquiry about Product Pricing",
        "Hello Sales Team, could you please provide me with the current pricing details "
        "for the 'SuperWidget Pro' and any available bulk discounts? Best regards, Potential Customer",
    )

    assert result is not None, "Gemini should return a parseable analysis"
    assert result["classification"] == "Sales"
    assert result["sentiment"] in ("Positive", "Neutral")

@pytest.mark.asyncio
async def test_live_gmail_latest_unread():
    """
    Prerequisites: an OAuth client and a refresh token obtained through /auth/login
    exported as LIVE_GOOGLE_CLIENT_ID, LIVE_GOOGLE_CLIENT_SECRET, LIVE_GOOGLE_REFRESH_TOKEN.
    """
    if not all(os.getenv(key) for key in LIVE_GOOGLE_ENV):
        pytest.skip("Skipping live test: LIVE_GOOGLE_* credentials not set")

    client_config = OAuthClientConfig(
        client_id=os.environ["LIVE_GOOGLE_CLIENT_ID"],
        client_secret=os.environ["LIVE_GOOGLE_CLIENT_SECRET"],
        redirect_uri="http://localhost:3000/oauth2callback",
    )
    store = CredentialStore(client_config)
    # Expired access token; google-auth refreshes it on the first call
    store.set_credential(Credential(
        access_token="", refresh_token=os.environ["LIVE_GOOGLE_REFRESH_TOKEN"], expiry=datetime(2000, 1, 1)))
    fetcher = EmailFetcher(client_config, store, GmailService())

    email = await fetcher.fetch_latest_unread()
    if email is None:
        pytest.skip("Inbox has no unread email (or the fetch failed, check logs)")

    assert isinstance(email.subject, str)
    assert isinstance(email.body, str)
