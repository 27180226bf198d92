class MailPulseError(Exception):
    """Base class for failures raised inside a component and resolved at its boundary."""

class ConfigurationError(MailPulseError):
    """Client id/secret/redirect or API key missing. Fatal for the affected component."""

class AuthorizationError(MailPulseError):
    """No usable credential where one is required. Re-run the consent flow."""

class TransportError(MailPulseError):
    """Network or provider call failed (timeouts included). Never retried."""

class ResponseFormatError(MailPulseError):
    """Model output could not be parsed or is missing required keys."""
