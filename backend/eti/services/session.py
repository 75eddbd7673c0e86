"""
View & session state machine.

SessionState is an explicit value; every transition is a pure function
returning a new state. Routers persist it in the session token.
"""

from typing import Optional

from pydantic import BaseModel

from eti.schemas import AppView, UserRole

# Overlay shown on top of any view while a management user has a candidate selected
CANDIDATE_REPORT_VIEW = "CANDIDATE_REPORT"

MANAGEMENT_ROLES = {UserRole.ADMIN, UserRole.HR_MANAGER}

DEFAULT_VIEWS: dict[UserRole, AppView] = {
    UserRole.ADMIN: AppView.ADMIN_PANEL,
    UserRole.HR_MANAGER: AppView.DASHBOARD,
    UserRole.CANDIDATE: AppView.CANDIDATE_PORTAL,
}

PERMITTED_VIEWS: dict[UserRole, set[AppView]] = {
    UserRole.ADMIN: {
        AppView.DASHBOARD,
        AppView.SCANNER,
        AppView.CANDIDATES,
        AppView.JOBS,
        AppView.CANDIDATE_PORTAL,
        AppView.ADMIN_PANEL,
    },
    UserRole.HR_MANAGER: {
        AppView.DASHBOARD,
        AppView.SCANNER,
        AppView.CANDIDATES,
        AppView.JOBS,
        AppView.CANDIDATE_PORTAL,
    },
    UserRole.CANDIDATE: {
        AppView.JOBS,
        AppView.CANDIDATE_PORTAL,
    },
}


class SessionState(BaseModel):
    role: Optional[UserRole] = None
    view: AppView = AppView.LANDING
    selected_candidate_id: Optional[str] = None


def is_management(role: Optional[UserRole]) -> bool:
    return role in MANAGEMENT_ROLES


def can_view(role: Optional[UserRole], view: AppView) -> bool:
    if role is None:
        return view == AppView.LANDING
    return view in PERMITTED_VIEWS[role]


def login(state: SessionState, role: UserRole) -> SessionState:
    return SessionState(role=role, view=DEFAULT_VIEWS[role])


def logout(state: SessionState) -> SessionState:
    return SessionState()


def navigate(state: SessionState, view: AppView) -> SessionState:
    """Switch views; any open candidate report closes."""
    if state.role is None:
        return state
    return state.model_copy(update={"view": view, "selected_candidate_id": None})


def select_candidate(state: SessionState, candidate_id: str) -> SessionState:
    """Open a candidate report. Only management roles can; others are unchanged."""
    if not is_management(state.role):
        return state
    return state.model_copy(update={"selected_candidate_id": candidate_id})


def close_candidate(state: SessionState) -> SessionState:
    return state.model_copy(update={"selected_candidate_id": None, "view": AppView.CANDIDATES})


def resolve_view(state: SessionState) -> str:
    """The view to render for this state, after overlay and permission rules."""
    if state.role is None:
        return AppView.LANDING.value
    if state.selected_candidate_id and is_management(state.role):
        return CANDIDATE_REPORT_VIEW
    if can_view(state.role, state.view):
        return state.view.value
    return DEFAULT_VIEWS[state.role].value
