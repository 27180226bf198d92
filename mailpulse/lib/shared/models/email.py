from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class EmailMessage:
    subject: str
    body: str
    id: Optional[str] = None
    sender: Optional[str] = None # from email
    date: Optional[datetime] = None
