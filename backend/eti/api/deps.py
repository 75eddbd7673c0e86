from fastapi import HTTPException, Request, status

from eti.services.repository import RecordRepository


def get_repository(request: Request) -> RecordRepository:
    """The repository attached during application startup."""
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Record repository is not ready",
        )
    return repository
