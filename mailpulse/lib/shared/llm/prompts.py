from mailpulse.lib.shared.models.analysis import Classification, Sentiment

def _quoted(labels) -> str:
    return ", ".join(f'"{label.value}"' for label in labels)

ANALYSIS_PROMPT = """Analyze the following email content (subject and body) and provide the analysis strictly in JSON format.
The JSON object should have two keys:
1. "classification": Categorize the email into one of the following: {classifications}.
2. "sentiment": Determine the overall sentiment: {sentiments}.

Subject: {subject}

Body:
{body}

Respond ONLY with the JSON object. Example: {{"classification": "Sales", "sentiment": "Positive"}}"""

def build_analysis_prompt(subject: str, body: str) -> str:
    """Same subject and body always give the same prompt; both are embedded verbatim."""
    return ANALYSIS_PROMPT.format(
        classifications=_quoted(Classification),
        sentiments=_quoted(Sentiment),
        subject=subject,
        body=body,
    )
