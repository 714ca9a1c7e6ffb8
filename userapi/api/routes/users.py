"""User Routes — POST /api/users and GET /api/users/{user_id}.

Invariants:
    - Body decoding happens before the service is touched: malformed JSON is a
      400 from the validation handler and the service is never called
    - Routes only translate between schemas and the User entity; status codes
      for failures come from error_handlers.py
    - The service is resolved per request from app.state (wired in the lifespan)
    - GET with an empty id reaches the service and is a 400, never a redirect
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from userapi.schemas.user import UserCreate, UserResponse
from userapi.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


def get_user_service(request: Request) -> UserService:
    """FastAPI dependency returning the process-wide UserService."""
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        raise RuntimeError("UserService not initialized")
    return service


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate, service: UserService = Depends(get_user_service),
):
    """Create a user."""
    user = await service.create_user(body.to_entity())
    return UserResponse.from_entity(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str, service: UserService = Depends(get_user_service),
):
    """Fetch a single user by id."""
    user = await service.get_user(user_id)
    return UserResponse.from_entity(user)


@router.get("/", response_model=UserResponse, include_in_schema=False)
async def get_user_without_id(
    service: UserService = Depends(get_user_service),
):
    """GET /api/users/ with no id: rejected by the service as INVALID_INPUT."""
    user = await service.get_user("")
    return UserResponse.from_entity(user)
