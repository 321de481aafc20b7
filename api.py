import logging
import secrets
import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from fastapi import Body, Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from config import APP_PASSWORD, APP_SUBTITLE, APP_TITLE, APP_USERNAME, APP_VERSION, SESSION_TTL
from providers.client import ComplianceServiceClient
from state.models import CheckKind, ConfigGroup, OptionSource
from state.session import ConfigSession

logger = logging.getLogger(__name__)

# Initialize the FastAPI app
app = FastAPI(
    title="Compliance Configuration API",
    description="REST access to configuration sessions of the banking compliance console",
    version=APP_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify the actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security
security = HTTPBasic()


def get_current_username(credentials: HTTPBasicCredentials = Depends(security)):
    """Validate API credentials."""
    is_username_correct = secrets.compare_digest(credentials.username, APP_USERNAME)
    is_password_correct = secrets.compare_digest(credentials.password, APP_PASSWORD)

    if not (is_username_correct and is_password_correct):
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_service_client():
    """Remote service client handed to new sessions; overridden in tests."""
    return ComplianceServiceClient()


# Global in-memory session storage with TTL
SESSIONS: Dict[str, ConfigSession] = {}
SESSION_EXPIRY: Dict[str, float] = {}


class SubmitOperation(str, Enum):
    SAVE_CONNECTION = "save_connection"
    APPLY_SELECTIONS = "apply_selections"
    ENABLE_LLM = "enable_llm"
    SAVE_RAG_CREDENTIALS = "save_rag_credentials"
    EXECUTE_PROMPT = "execute_prompt"


class ToggleRequest(BaseModel):
    check_id: str
    checked: bool
    kind: CheckKind


def _clear_expired_sessions():
    """Drop expired sessions to prevent memory leaks."""
    current_time = time.time()
    expired_keys = [key for key, expiry_time in SESSION_EXPIRY.items() if current_time > expiry_time]
    for key in expired_keys:
        SESSIONS.pop(key, None)
        SESSION_EXPIRY.pop(key, None)
    if expired_keys:
        logger.info(f"Cleared {len(expired_keys)} expired session(s)")


def get_session(session_id: str, username: str = Depends(get_current_username)):
    """Look up a live session and refresh its expiry."""
    _clear_expired_sessions()
    if session_id not in SESSIONS:
        raise HTTPException(status_code=404, detail="Session not found. Please create a session first.")
    SESSION_EXPIRY[session_id] = time.time() + SESSION_TTL
    return SESSIONS[session_id]


def _options_payload(session):
    catalog = session.catalog
    return {
        "database_engines": catalog.database_engines,
        "llm_providers": catalog.llm_providers,
        "llm_model_options": session.resolver.llm_model_options(),
        "generation_model_options": session.resolver.generation_model_options(),
        "use_cases": [use_case.model_dump() for use_case in catalog.use_cases],
        "dormant_checks": [check.model_dump(mode="json") for check in catalog.dormant_checks],
        "compliance_checks": [check.model_dump(mode="json") for check in catalog.compliance_checks],
        "errors": {source.value: catalog.error_for(source) for source in OptionSource},
        "loading": {source.value: catalog.is_loading(source) for source in OptionSource},
    }


def _notice_response(notice):
    if notice.level == "warning":
        raise HTTPException(status_code=422, detail={"field": notice.field, "message": notice.message})
    if notice.level == "error":
        raise HTTPException(status_code=502, detail=notice.message)
    return {"success": True, "message": notice.message, "operation": notice.operation}


@app.get("/")
def read_root():
    """Root endpoint with API information."""
    return {
        "title": APP_TITLE,
        "description": APP_SUBTITLE,
        "version": APP_VERSION,
        "endpoints": [
            "/sessions",
            "/sessions/{session_id}/config",
            "/sessions/{session_id}/options",
            "/sessions/{session_id}/checks/toggle",
            "/sessions/{session_id}/submit/{operation}",
        ]
    }


@app.get("/health")
def health_check():
    """Return the health status of the API."""
    _clear_expired_sessions()
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "active_sessions": len(SESSIONS)
    }


@app.post("/sessions")
def create_session(
        load_options: bool = False,
        username: str = Depends(get_current_username),
        client: ComplianceServiceClient = Depends(get_service_client)
):
    """Create a configuration session, optionally loading the remote option lists right away."""
    _clear_expired_sessions()
    session = ConfigSession(client=client)
    if load_options:
        session.load_options()

    session_id = secrets.token_hex(8)
    SESSIONS[session_id] = session
    SESSION_EXPIRY[session_id] = time.time() + SESSION_TTL
    logger.info(f"Session {session_id} created by {username}")

    return {
        "session_id": session_id,
        "config": session.store.snapshot(),
        "expires_in": f"{SESSION_TTL / 3600:.1f} hours"
    }


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str, session: ConfigSession = Depends(get_session)):
    SESSIONS.pop(session_id, None)
    SESSION_EXPIRY.pop(session_id, None)
    return {"status": "deleted", "session_id": session_id}


@app.get("/sessions/{session_id}/config")
def read_config(session: ConfigSession = Depends(get_session)):
    return session.store.snapshot()


@app.get("/sessions/{session_id}/config/{group}")
def read_group(group: ConfigGroup, session: ConfigSession = Depends(get_session)):
    return session.store.get(group).model_dump(mode="json")


@app.patch("/sessions/{session_id}/config/{group}")
def update_group(
        group: ConfigGroup,
        patch: Dict[str, Any] = Body(...),
        session: ConfigSession = Depends(get_session)
):
    """Merge a partial update into a group; provider and use-case changes cascade."""
    try:
        updated = session.edit(group, patch)
    except PayloadError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return updated.model_dump(mode="json")


@app.post("/sessions/{session_id}/config/{group}/reset")
def reset_group(group: ConfigGroup, session: ConfigSession = Depends(get_session)):
    return session.reset_group(group).model_dump(mode="json")


@app.post("/sessions/{session_id}/reset")
def reset_session(session: ConfigSession = Depends(get_session)):
    session.reset_all()
    return session.store.snapshot()


@app.get("/sessions/{session_id}/options")
def read_options(session: ConfigSession = Depends(get_session)):
    return _options_payload(session)


@app.post("/sessions/{session_id}/options/load")
def load_options(session: ConfigSession = Depends(get_session)):
    session.load_options()
    return _options_payload(session)


@app.post("/sessions/{session_id}/checks/toggle")
def toggle_check(request: ToggleRequest, session: ConfigSession = Depends(get_session)):
    selected = session.toggle_check(request.check_id, request.checked, request.kind)
    return {"kind": request.kind.value, "selected": sorted(selected)}


@app.post("/sessions/{session_id}/submit/{operation}")
def submit(operation: SubmitOperation, session: ConfigSession = Depends(get_session)):
    """Validate and send one configuration operation to its remote service."""
    return _notice_response(session.submit(operation.value))


@app.post("/sessions/{session_id}/knowledge/upload")
async def upload_knowledge(
        file: UploadFile = File(...),
        session: ConfigSession = Depends(get_session)
):
    """Forward a knowledge document to the knowledge service using the session's chunking settings."""
    content = await file.read()
    return _notice_response(session.submit("upload_knowledge", file_name=file.filename, content=content))


@app.on_event("shutdown")
async def shutdown_event():
    """Run cleanup tasks on shutdown."""
    SESSIONS.clear()
    SESSION_EXPIRY.clear()
    logger.info(f"Compliance Configuration API shutting down at {datetime.now().isoformat()}")


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    uvicorn.run(app, host="0.0.0.0", port=8000)
