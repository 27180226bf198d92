from enum import Enum
from typing import Any, Dict

# Parsed model output, passed through as-is once validated
AnalysisResult = Dict[str, Any]

REQUIRED_KEYS = ("classification", "sentiment")

class Classification(str, Enum):
    SUPPORT = "Support"
    SALES = "Sales"
    INVOICE = "Invoice"
    SPAM = "Spam"
    PERSONAL = "Personal"
    PROJECT_UPDATE = "Project Update"
    MARKETING = "Marketing"
    OTHER = "Other"

class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"
