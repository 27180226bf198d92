import asyncio
import logging
from typing import Dict, Optional

from google.oauth2.credentials import Credentials

from mailpulse.config import OAuthClientConfig
from mailpulse.lib.shared.models.auth import Credential

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"

class CredentialStore:
    """
    In-memory credential slots keyed by session. Nothing is persisted;
    the default session is the single global slot used by the PoC endpoints.
    """
    def __init__(self, client_config: Optional[OAuthClientConfig]):
        self.client_config = client_config
        self._credentials: Dict[str, Credential] = {}
        self._google_credentials: Dict[str, Credentials] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def set_credential(self, credential: Credential, session_id: str = DEFAULT_SESSION) -> None:
        # Last writer wins
        self._credentials[session_id] = credential
        self._google_credentials[session_id] = credential.to_google(self.client_config)
        if credential.refresh_token:
            logger.info("Stored credential with refresh token for session %r (memory only).", session_id)
        else:
            logger.info("Stored access token only for session %r (memory only).", session_id)

    def get_credential(self, session_id: str = DEFAULT_SESSION) -> Optional[Credential]:
        return self._credentials.get(session_id)

    def get_google_credentials(self, session_id: str = DEFAULT_SESSION) -> Optional[Credentials]:
        return self._google_credentials.get(session_id)

    def has_credential(self, session_id: str = DEFAULT_SESSION) -> bool:
        return session_id in self._credentials

    def clear(self, session_id: str = DEFAULT_SESSION) -> None:
        self._credentials.pop(session_id, None)
        self._google_credentials.pop(session_id, None)

    def lock(self, session_id: str = DEFAULT_SESSION) -> asyncio.Lock:
        if session_id not in self._locks:
            self._locks[session_id] = asyncio.Lock()
        return self._locks[session_id]
