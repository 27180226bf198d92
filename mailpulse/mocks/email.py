import logging

from google.oauth2.credentials import Credentials

from mailpulse.lib.shared.models.email import EmailMessage

logger = logging.getLogger(__name__)

PLACEHOLDER_SUBJECT = "Placeholder Subject"
PLACEHOLDER_BODY = "Placeholder Body - Fetching not implemented yet."

class DummyEmailFetcher:
    """Stands in for GmailService in demo mode; authorization is still checked by EmailFetcher."""

    def fetch_latest_unread(self, creds: Credentials) -> EmailMessage:
        logger.info("Returning placeholder email (mock data).")
        return EmailMessage(subject=PLACEHOLDER_SUBJECT, body=PLACEHOLDER_BODY)
