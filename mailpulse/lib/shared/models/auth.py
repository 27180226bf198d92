from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from google.oauth2.credentials import Credentials

if TYPE_CHECKING:
    from mailpulse.config import OAuthClientConfig

@dataclass
class Credential:
    access_token: str
    refresh_token: Optional[str] = None
    expiry: Optional[datetime] = None # naive UTC, as google-auth reports it
    scopes: List[str] = field(default_factory=list)
    token_type: Optional[str] = "Bearer"

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    @classmethod
    def from_google(cls, creds: Credentials, token_type: Optional[str] = "Bearer") -> "Credential":
        return cls(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expiry=creds.expiry,
            scopes=list(creds.scopes or []),
            token_type=token_type,
        )

    def to_google(self, client_config: Optional["OAuthClientConfig"] = None) -> Credentials:
        """
        Builds the google-auth credentials used for authorized calls.
        Only a credential carrying a refresh token (and a client to refresh it with)
        gets the full set; otherwise the access token is all the client sees.
        """
        if self.refresh_token and client_config:
            return Credentials(
                token=self.access_token,
                refresh_token=self.refresh_token,
                token_uri=client_config.token_uri,
                client_id=client_config.client_id,
                client_secret=client_config.client_secret,
                scopes=self.scopes or None,
                expiry=self.expiry,
            )
        return Credentials(token=self.access_token, expiry=self.expiry)
