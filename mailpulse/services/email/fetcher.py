import asyncio
import logging
from typing import Optional, Protocol

from google.oauth2.credentials import Credentials

from mailpulse.config import OAuthClientConfig
from mailpulse.lib.shared.errors import AuthorizationError, MailPulseError
from mailpulse.lib.shared.models.email import EmailMessage
from mailpulse.services.auth.store import DEFAULT_SESSION, CredentialStore

logger = logging.getLogger(__name__)

class MailProvider(Protocol):
    def fetch_latest_unread(self, creds: Credentials) -> Optional[EmailMessage]: ...

class EmailFetcher:
    def __init__(self, client_config: Optional[OAuthClientConfig], store: CredentialStore, provider: MailProvider, timeout: float = 30.0):
        self.client_config = client_config
        self.store = store
        self.provider = provider
        self.timeout = timeout

    def _require_creds(self, session_id: str) -> Credentials:
        if not self.client_config:
            raise AuthorizationError("OAuth client not configured")
        creds = self.store.get_google_credentials(session_id)
        if creds is None:
            raise AuthorizationError(f"No credential stored for session {session_id!r}")
        return creds

    async def fetch_latest_unread(self, session_id: str = DEFAULT_SESSION) -> Optional[EmailMessage]:
        """Returns exactly one message, or None if not authorized, nothing is unread, or the provider failed."""
        try:
            creds = self._require_creds(session_id)
            logger.info("Fetching latest unread email...")
            email = await asyncio.wait_for(
                asyncio.to_thread(self.provider.fetch_latest_unread, creds), timeout=self.timeout)
        except AuthorizationError as e:
            logger.error("Cannot fetch email (not authorized): %s", e)
            return None
        except asyncio.TimeoutError:
            logger.error("Fetching email timed out after %ss", self.timeout)
            return None
        except MailPulseError as e:
            logger.error("Error fetching email: %s", e)
            return None
        except Exception as e:
            # Unexpected payload shapes from the provider (missing keys, bad dates)
            logger.error("Unexpected error fetching email: %s", e, exc_info=True)
            return None

        if email is None:
            logger.warning("No unread email found.")
        return email