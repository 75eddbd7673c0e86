"""
Session API endpoints.

Role selection and view navigation. Every call returns a fresh session
token carrying the new state; no password is involved except for the
admin entry point.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from eti.api.deps import get_repository
from eti.core.security import decode_session, encode_session, verify_admin_code
from eti.schemas import AppView, UserRole
from eti.services import session as session_machine
from eti.services.repository import RecordRepository
from eti.services.session import SessionState

router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


# ============== Pydantic Schemas ==============


class LoginRequest(BaseModel):
    """Schema for choosing a role. Admins use /admin-login."""

    role: UserRole


class AdminLoginRequest(BaseModel):
    access_code: str


class NavigateRequest(BaseModel):
    view: AppView


class SelectCandidateRequest(BaseModel):
    candidate_id: str


class SessionResponse(BaseModel):
    """Schema for the session state plus the view it resolves to."""

    token: str
    role: Optional[UserRole] = None
    view: AppView
    selected_candidate_id: Optional[str] = None
    rendered_view: str


# ============== Helper Functions ==============


def session_response(state: SessionState) -> SessionResponse:
    return SessionResponse(
        token=encode_session(state),
        role=state.role,
        view=state.view,
        selected_candidate_id=state.selected_candidate_id,
        rendered_view=session_machine.resolve_view(state),
    )


async def get_optional_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> SessionState:
    """Session from the bearer token, or the logged-out state when there is none."""
    if credentials is None:
        return SessionState()
    state = decode_session(credentials.credentials)
    return state if state is not None else SessionState()


async def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> SessionState:
    """
    Dependency to get the current session from the bearer token.

    Raises HTTPException if the token is missing, invalid, or logged out.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Session required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    state = decode_session(credentials.credentials)
    if state is None or state.role is None:
        raise credentials_exception

    return state


async def require_management(state: SessionState = Depends(get_session)) -> SessionState:
    if not session_machine.is_management(state.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="HR or admin role required")
    return state


async def require_admin(state: SessionState = Depends(get_session)) -> SessionState:
    if state.role != UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return state


# ============== API Endpoints ==============


@router.get("", response_model=SessionResponse)
async def current_session(state: SessionState = Depends(get_optional_session)):
    """Current session state and the view it renders."""
    return session_response(state)


@router.post("/login", response_model=SessionResponse)
async def login(data: LoginRequest):
    """
    Choose a role (HR manager or candidate).

    Jumps to the role's default view: HR_MANAGER -> DASHBOARD,
    CANDIDATE -> CANDIDATE_PORTAL.
    """
    if data.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Use the admin entry point",
        )
    return session_response(session_machine.login(SessionState(), data.role))


@router.post("/admin-login", response_model=SessionResponse)
async def admin_login(data: AdminLoginRequest):
    """Admin entry point; lands on ADMIN_PANEL."""
    if not verify_admin_code(data.access_code):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin access code")
    return session_response(session_machine.login(SessionState(), UserRole.ADMIN))


@router.post("/logout", response_model=SessionResponse)
async def logout(state: SessionState = Depends(get_optional_session)):
    """Clear role and selection and return to LANDING."""
    return session_response(session_machine.logout(state))


@router.post("/navigate", response_model=SessionResponse)
async def navigate(data: NavigateRequest, state: SessionState = Depends(get_session)):
    return session_response(session_machine.navigate(state, data.view))


@router.post("/select", response_model=SessionResponse)
async def select_candidate(
    data: SelectCandidateRequest,
    state: SessionState = Depends(get_session),
    repository: RecordRepository = Depends(get_repository),
):
    """Open a candidate report (management roles only; ignored for candidates)."""
    if session_machine.is_management(state.role) and repository.get_candidate(data.candidate_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    return session_response(session_machine.select_candidate(state, data.candidate_id))


@router.post("/close", response_model=SessionResponse)
async def close_candidate(state: SessionState = Depends(get_session)):
    """Close the candidate report and return to CANDIDATES."""
    return session_response(session_machine.close_candidate(state))
