import logging
from dataclasses import dataclass
from typing import Optional

from mailpulse.lib.shared.llm.analysis_service import EmailAnalyzer
from mailpulse.lib.shared.models.analysis import AnalysisResult
from mailpulse.lib.shared.models.email import EmailMessage
from mailpulse.services.auth.flow import AuthFlow
from mailpulse.services.auth.store import DEFAULT_SESSION, CredentialStore
from mailpulse.services.email.fetcher import EmailFetcher

logger = logging.getLogger(__name__)

@dataclass
class PipelineResult:
    success: bool
    message: str
    analysis: Optional[AnalysisResult] = None
    email: Optional[EmailMessage] = None

    @classmethod
    def failed(cls, message: str) -> "PipelineResult":
        return cls(success=False, message=message)

class AnalysisPipeline:
    """Credential -> latest unread email -> analysis. Stops at the first step that comes back empty."""

    def __init__(self, auth_flow: AuthFlow, email_fetcher: EmailFetcher, analyzer: EmailAnalyzer, store: CredentialStore):
        self.auth_flow = auth_flow
        self.email_fetcher = email_fetcher
        self.analyzer = analyzer
        self.store = store

    async def run(self, session_id: str = DEFAULT_SESSION, code: Optional[str] = None) -> PipelineResult:
        async with self.store.lock(session_id):
            if code:
                credential = await self.auth_flow.exchange_code(code, session_id)
            else:
                credential = self.store.get_credential(session_id)
            if credential is None:
                logger.error("Pipeline stopped: no credential for session %r.", session_id)
                return PipelineResult.failed("Not authorized. Complete the consent flow first.")

            email = await self.email_fetcher.fetch_latest_unread(session_id)
            if email is None:
                logger.error("Pipeline stopped: no email retrieved for session %r.", session_id)
                return PipelineResult.failed("Failed to retrieve the latest unread email.")

            result = await self.analyze_message(email.subject, email.body)
            result.email = email if result.success else None
            return result

    async def analyze_message(self, subject: str, body: str) -> PipelineResult:
        analysis = await self.analyzer.analyze(subject, body)
        if analysis is None:
            logger.error("Pipeline stopped: analysis failed.")
            return PipelineResult.failed("Analysis failed.")
        return PipelineResult(success=True, message="Analysis successful", analysis=analysis)
