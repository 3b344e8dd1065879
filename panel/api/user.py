"""User area: the signed-in account's own profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from panel.api.deps import get_current_principal, get_directory
from panel.schemas.accounts import AccountRead
from panel.schemas.auth import Principal
from panel.services.directory import AccountDirectory

router = APIRouter()


@router.get("", response_model=AccountRead)
def get_user_page(
    principal: Annotated[Principal, Depends(get_current_principal)],
    directory: Annotated[AccountDirectory, Depends(get_directory)],
) -> AccountRead:
    """Return the account behind the session (looked up by the login email)."""
    user = directory.find_by_email(principal.email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return AccountRead.model_validate(user)
