import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from mailpulse.config import MailPulseConfig, configure_logging
from mailpulse.lib.shared.llm.analysis_service import EmailAnalyzer
from mailpulse.mocks.email import DummyEmailFetcher
from mailpulse.services.auth.flow import AuthFlow
from mailpulse.services.auth.store import CredentialStore
from mailpulse.services.email.fetcher import EmailFetcher
from mailpulse.services.email.providers.gmail import GmailService
from mailpulse.services.pipeline import AnalysisPipeline, PipelineResult

from mailpulse.dependencies import *

logger = logging.getLogger(__name__)

SAMPLE_SUBJECT = "Inquiry about Product Pricing"
SAMPLE_BODY = """
        Hello Sales Team,

        I hope this email finds you well.
        I was looking at your product catalog online and I'm very interested in the 'SuperWidget Pro'.
        Could you please provide me with the current pricing details and any available bulk discounts?

        Looking forward to your response.

        Best regards,
        Potential Customer
    """

# --- Lifecycle Events ---
@asynccontextmanager
async def startup_event(app: FastAPI):
    config = MailPulseConfig()
    config.log_configuration_warnings()
    client_config = config.oauth_client_config()

    app.state.config = config
    app.state.credential_store = CredentialStore(client_config)
    app.state.auth_flow = AuthFlow(client_config, app.state.credential_store, timeout=config.oauth_timeout)

    # Initialize provider based on configuration
    if config.use_mock_data:
        logger.info("Starting in demo mode (placeholder email).")
        provider = DummyEmailFetcher()
    else:
        provider = GmailService()
    app.state.email_fetcher = EmailFetcher(client_config, app.state.credential_store, provider, timeout=config.gmail_timeout)

    app.state.analyzer = EmailAnalyzer.from_config(config)
    app.state.pipeline = AnalysisPipeline(
        app.state.auth_flow, app.state.email_fetcher, app.state.analyzer, app.state.credential_store)
    try:
        yield
    finally:
        # Tokens live in memory only
        app.state.credential_store = None
        app.state.auth_flow = None
        app.state.email_fetcher = None
        app.state.analyzer = None
        app.state.pipeline = None
        logger.info("Services have been shut down.")

app = FastAPI(
    title="MailPulse API",
    description="Gmail OAuth + Gemini email classification PoC",
    version="0.1.0",
    lifespan=startup_event
)

# --- Pydantic Models ---
class AnalyzeRequest(BaseModel):
    subject: str
    body: str

class AuthStatus(BaseModel):
    is_authenticated: bool
    has_refresh_token: bool = False

# --- Helper Functions ---
def analysis_response(result: PipelineResult, source: str) -> JSONResponse:
    if result.success:
        content = {"message": f"{result.message} ({source})", "analysis": result.analysis}
        if result.email is not None:
            content["email"] = {"subject": result.email.subject}
        return JSONResponse(content=content)
    logger.error("Analysis failed (%s): %s", source, result.message)
    return JSONResponse(
        status_code=500,
        content={"message": f"Analysis failed ({source})", "error": f"{result.message} Check server logs."},
    )

# --- Endpoints ---
@app.get("/", response_class=PlainTextResponse)
async def root():
    return "AI Email POC Server is running!"

@app.get("/auth/url")
async def get_auth_url(auth_flow: AuthFlow = Depends(get_auth_flow)):
    auth_url = auth_flow.generate_consent_url()
    if not auth_url:
        raise HTTPException(status_code=503, detail="Google OAuth is not configured")
    return {"auth_url": auth_url}

@app.get("/auth/login")
async def login(auth_flow: AuthFlow = Depends(get_auth_flow)):
    auth_url = auth_flow.generate_consent_url()
    if not auth_url:
        raise HTTPException(status_code=503, detail="Google OAuth is not configured")
    return RedirectResponse(auth_url)

@app.get("/oauth2callback")
async def oauth2callback(code: Optional[str] = None, error: Optional[str] = None, auth_flow: AuthFlow = Depends(get_auth_flow)):
    if error or not code:
        raise HTTPException(status_code=400, detail=f"Authorization was not granted: {error or 'missing code'}")
    credential = await auth_flow.exchange_code(code)
    if credential is None:
        raise HTTPException(status_code=502, detail="Failed to exchange authorization code. Restart the consent flow.")
    return {"message": "Authentication successful", "has_refresh_token": credential.can_refresh}

@app.get("/auth/status", response_model=AuthStatus)
async def auth_status(store: CredentialStore = Depends(get_credential_store)):
    credential = store.get_credential()
    return AuthStatus(
        is_authenticated=credential is not None,
        has_refresh_token=bool(credential and credential.can_refresh),
    )

@app.post("/analyze-test")
async def analyze_test(pipeline: AnalysisPipeline = Depends(get_pipeline)):
    logger.info("Received request on /analyze-test")
    result = await pipeline.analyze_message(SAMPLE_SUBJECT, SAMPLE_BODY)
    return analysis_response(result, "using hardcoded data")

@app.post("/analyze")
async def analyze(request: AnalyzeRequest, pipeline: AnalysisPipeline = Depends(get_pipeline)):
    result = await pipeline.analyze_message(request.subject, request.body)
    return analysis_response(result, "submitted email")

@app.post("/analyze-latest")
async def analyze_latest(pipeline: AnalysisPipeline = Depends(get_pipeline)):
    result = await pipeline.run()
    return analysis_response(result, "latest unread email")

def run():
    load_dotenv(".env.local")
    load_dotenv()
    config = MailPulseConfig()
    configure_logging(config.log_level)
    uvicorn.run(app, host="0.0.0.0", port=config.port)

if __name__ == "__main__":
    run()
