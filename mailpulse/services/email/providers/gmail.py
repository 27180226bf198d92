import base64
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httplib2
from bs4 import BeautifulSoup
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from mailpulse.lib.shared.errors import AuthorizationError, TransportError
from mailpulse.lib.shared.models.email import EmailMessage

logger = logging.getLogger(__name__)

class GmailService:
    UNREAD_QUERY = "is:unread"
    # Only the first page of unread inbox messages is considered
    CANDIDATES = 10

    def fetch_latest_unread(self, creds: Credentials) -> Optional[EmailMessage]:
        """
        Picks the most recently received unread inbox message (highest internalDate)
        and returns its plain-text subject and body. Blocking; run it off the event loop.
        """
        try:
            service = build("gmail", "v1", credentials=creds, cache_discovery=False)
            result = service.users().messages().list(
                userId="me", q=self.UNREAD_QUERY, labelIds=["INBOX"], maxResults=self.CANDIDATES).execute()
            messages = result.get("messages", [])
            logger.info("[Gmail] Found %d unread message(s).", len(messages))
            if not messages:
                return None

            latest_id = self._select_latest(service, messages)
            msg = service.users().messages().get(userId="me", id=latest_id, format="full").execute()
            return self._parse_email(msg)
        except HttpError as e:
            if e.resp.status in (401, 403) and "accessNotConfigured" not in str(e):
                raise AuthorizationError(f"Gmail rejected the stored credential: {e}") from e
            raise TransportError(f"Gmail API call failed: {e}") from e
        except GoogleAuthError as e:
            raise AuthorizationError(f"Could not authorize Gmail call: {e}") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise TransportError(f"Could not reach Gmail: {e}") from e

    def _select_latest(self, service, messages: List[Dict[str, Any]]) -> str:
        if len(messages) == 1:
            return messages[0]["id"]
        received = {}
        for message in messages:
            meta = service.users().messages().get(userId="me", id=message["id"], format="minimal").execute()
            received[message["id"]] = int(meta.get("internalDate", 0))
        return max(received, key=received.get)

    def _parse_email(self, msg: Dict[str, Any]) -> EmailMessage:
        subject = ""
        sender = ""
        for header in msg.get("payload", {}).get("headers", []):
            if header["name"].lower() == "subject":
                subject = header["value"]
            elif header["name"].lower() == "from":
                sender = header["value"]

        date = None
        if msg.get("internalDate"):
            date = datetime.fromtimestamp(int(msg["internalDate"]) / 1000, tz=timezone.utc)

        return EmailMessage(
            id=msg.get("id"),
            subject=subject,
            sender=sender,
            body=self._get_email_body(msg.get("payload", {})),
            date=date,
        )

    def _get_email_body(self, payload: Dict[str, Any]) -> str:
        plain = self._find_part(payload, "text/plain")
        if plain is not None:
            return plain.strip()
        html = self._find_part(payload, "text/html")
        if html is not None:
            return BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)
        return ""

    def _find_part(self, payload: Dict[str, Any], mime_type: str) -> Optional[str]:
        # Depth-first so multipart/alternative nested in multipart/mixed is reached
        if payload.get("mimeType") == mime_type and payload.get("body", {}).get("data"):
            return _decode_base64url(payload["body"]["data"])
        for part in payload.get("parts", []):
            found = self._find_part(part, mime_type)
            if found is not None:
                return found
        return None

def _decode_base64url(data: str) -> str:
    # Fix padding for base64 decoding
    data += "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data).decode("utf-8", errors="replace")
