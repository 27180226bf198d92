import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mailpulse.lib.shared.models.util import Environment

logger = logging.getLogger(__name__)

GMAIL_READONLY_SCOPE = "https://www.googleapis.com/auth/gmail.readonly"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"

def _env_seconds(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %ss", name, raw, default)
        return default

@dataclass(frozen=True)
class OAuthClientConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    def to_client_config(self) -> Dict[str, Any]:
        # Shape expected by google_auth_oauthlib's Flow.from_client_config
        return {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [self.redirect_uri],
            }
        }

class MailPulseConfig:
    def __init__(self):
        # Determine Environment
        env_str = os.getenv("MAILPULSE_ENV", "dev").lower()
        try:
            self.env = Environment(env_str)
        except ValueError:
            self.env = Environment.DEV

        self.google_client_id = os.getenv("GOOGLE_CLIENT_ID")
        self.google_client_secret = os.getenv("GOOGLE_CLIENT_SECRET")
        self.google_redirect_uri = os.getenv("GOOGLE_REDIRECT_URI")

        self.gemini_api_key = os.getenv("GEMINI_API_KEY")
        self.gemini_model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.strict_labels = _env_flag("ANALYSIS_STRICT_LABELS")

        self.oauth_timeout = _env_seconds("OAUTH_TIMEOUT_SECONDS", 30.0)
        self.gmail_timeout = _env_seconds("GMAIL_TIMEOUT_SECONDS", 30.0)
        self.gemini_timeout = _env_seconds("GEMINI_TIMEOUT_SECONDS", 30.0)

        self.port = int(os.getenv("PORT", 3000))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Environment Configuration
        if self.env == Environment.TEST:
            self.use_mock_data = True
        elif self.env == Environment.DEV:
            self.use_mock_data = _env_flag("USE_MOCK_DATA")
        else: # PROD
            self.use_mock_data = False

    def oauth_client_config(self) -> Optional[OAuthClientConfig]:
        if not (self.google_client_id and self.google_client_secret and self.google_redirect_uri):
            return None
        return OAuthClientConfig(
            client_id=self.google_client_id,
            client_secret=self.google_client_secret,
            redirect_uri=self.google_redirect_uri,
        )

    def log_configuration_warnings(self) -> None:
        """Reports missing settings once, at startup. Affected components degrade instead of crashing."""
        if self.oauth_client_config() is None:
            logger.error(
                "Missing Google OAuth settings (GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, "
                "GOOGLE_REDIRECT_URI). Consent and email fetching will not work."
            )
        if not self.gemini_api_key:
            logger.error("GEMINI_API_KEY is not defined. Analysis will fail.")

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
