"""
User endpoints for API v1.

Registration is public and idempotent: the frontend calls it after
every sign-in, and a repeat call returns the stored record with
``created`` set to false and status 200 instead of 201.
"""

from fastapi import APIRouter, Depends, Path, Response, status

from styledecor_api.app.api.deps import get_user_service
from styledecor_api.app.core.policy import Identity, Operation, authorize
from styledecor_api.app.core.security import get_current_identity
from styledecor_api.app.schemas.user import RoleRead, UserCreate, UserRead, UserRegistered, UserUpdate
from styledecor_api.app.services.user_service import UserService


router = APIRouter()


@router.post("", response_model=UserRegistered, status_code=status.HTTP_201_CREATED)
def register_user(
    user: UserCreate,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> UserRegistered:
    """Register a user, or return the existing record for a known email."""
    authorize(None, Operation.REGISTER_USER)
    created, record = service.register(user.email, user.model_dump(exclude={"email"}))
    if not created:
        response.status_code = status.HTTP_200_OK
    return UserRegistered(created=created, user=record)


@router.get("/role/{email}", response_model=RoleRead)
def get_user_role(
    email: str = Path(..., description="User email"),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> RoleRead:
    """Resolve the caller's own role (``user`` if never registered)."""
    authorize(identity, Operation.READ_ROLE, email.lower())
    return RoleRead(email=email.lower(), role=service.get_role(email))


@router.get("/{email}", response_model=UserRead)
def get_user_profile(
    email: str = Path(..., description="User email"),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Return the caller's own profile."""
    authorize(identity, Operation.READ_PROFILE, email.lower())
    return service.get_user(email)


@router.put("/{email}", response_model=UserRead)
def update_user_profile(
    body: UserUpdate,
    email: str = Path(..., description="User email"),
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Create or update a profile.

    Users may edit their own profile; administrators may edit anyone's
    and are the only ones who may change a role.
    """
    authorize(identity, Operation.UPDATE_PROFILE, email.lower())
    fields = body.model_dump(exclude_none=True)
    if "role" in fields:
        authorize(identity, Operation.CHANGE_ROLE)
    return service.update_profile(email, fields)
