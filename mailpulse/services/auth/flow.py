import asyncio
import logging
from typing import Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import Flow

from mailpulse.config import GMAIL_READONLY_SCOPE, OAuthClientConfig
from mailpulse.lib.shared.errors import AuthorizationError, ConfigurationError, MailPulseError, TransportError
from mailpulse.lib.shared.models.auth import Credential
from mailpulse.services.auth.store import DEFAULT_SESSION, CredentialStore

logger = logging.getLogger(__name__)

class AuthFlow:
    SCOPES = [GMAIL_READONLY_SCOPE]

    def __init__(self, client_config: Optional[OAuthClientConfig], store: CredentialStore, timeout: float = 30.0):
        self.client_config = client_config
        self.store = store
        self.timeout = timeout

    def _build_flow(self) -> Flow:
        if not self.client_config:
            raise ConfigurationError("Google OAuth client is not configured")
        # Consent and exchange happen in separate requests, so PKCE state cannot be carried over
        return Flow.from_client_config(
            self.client_config.to_client_config(),
            scopes=self.SCOPES,
            redirect_uri=self.client_config.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def generate_consent_url(self, state: Optional[str] = None) -> Optional[str]:
        """
        Returns the Google consent screen URL (offline access, read-only Gmail,
        forced re-consent) or None if the OAuth client is not configured.
        """
        try:
            flow = self._build_flow()
        except ConfigurationError as e:
            logger.error("Cannot generate consent URL: %s", e)
            return None

        params = {"access_type": "offline", "prompt": "consent"}
        if state:
            params["state"] = state
        auth_url, _ = flow.authorization_url(**params)
        logger.info("Generated consent URL: %s", auth_url)
        return auth_url

    async def exchange_code(self, code: str, session_id: str = DEFAULT_SESSION) -> Optional[Credential]:
        """
        Exchanges an authorization code for tokens and stores them.
        Returns None on any failure; the store is left untouched in that case.
        A failed exchange is not retried, the caller has to restart the consent flow.
        """
        try:
            if not code:
                raise AuthorizationError("No authorization code supplied")
            flow = self._build_flow()
            logger.info("Attempting to exchange code for tokens...")
            token = await asyncio.wait_for(asyncio.to_thread(flow.fetch_token, code=code), timeout=self.timeout)
            credential = Credential.from_google(flow.credentials, token_type=(token or {}).get("token_type", "Bearer"))
        except asyncio.TimeoutError:
            logger.error("Token exchange timed out after %ss", self.timeout)
            return None
        except MailPulseError as e:
            logger.error("Cannot exchange authorization code: %s", e)
            return None
        except Exception as e:
            # oauthlib / requests raise their own hierarchies for provider and network errors
            logger.error("Error exchanging authorization code for tokens: %s", e)
            return None

        logger.info("Successfully obtained tokens from code.")
        self.store.set_credential(credential, session_id)
        return credential

    async def refresh(self, session_id: str = DEFAULT_SESSION) -> Optional[Credential]:
        """Trades the stored refresh token for a new access token."""
        try:
            credential = self.store.get_credential(session_id)
            if not credential:
                raise AuthorizationError(f"No credential stored for session {session_id!r}")
            # Refresh a copy so a timed-out call cannot rewrite the stored token later
            google_creds = credential.to_google(self.store.client_config)
            if not credential.can_refresh or not google_creds.refresh_token:
                raise AuthorizationError("Stored credential has no refresh token")
            try:
                await asyncio.wait_for(asyncio.to_thread(google_creds.refresh, Request()), timeout=self.timeout)
            except GoogleAuthError as e:
                raise TransportError(f"Refresh rejected by provider: {e}") from e
        except asyncio.TimeoutError:
            logger.error("Token refresh timed out after %ss", self.timeout)
            return None
        except MailPulseError as e:
            logger.error("Cannot refresh access token: %s", e)
            return None

        refreshed = Credential.from_google(google_creds, token_type=credential.token_type)
        self.store.set_credential(refreshed, session_id)
        logger.info("Access token refreshed for session %r.", session_id)
        return refreshed
