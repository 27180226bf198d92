from fastapi import Request
from mailpulse.services.auth.flow import AuthFlow
from mailpulse.services.auth.store import CredentialStore
from mailpulse.services.pipeline import AnalysisPipeline

def get_credential_store(request: Request) -> CredentialStore:
    return request.app.state.credential_store

def get_auth_flow(request: Request) -> AuthFlow:
    return request.app.state.auth_flow

def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline
