import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from app.api import deps
from app.core.security import create_access_token, verify_supervisor_credentials
from app.schemas.auth import SupervisorResponse, Token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    """Exchange the supervisor credentials for a bearer token."""
    if not verify_supervisor_credentials(form_data.username, form_data.password):
        logger.warning("Rejected login attempt for %r", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=create_access_token(form_data.username))


@router.get("/me", response_model=SupervisorResponse)
async def read_current_user(current_user: dict = Depends(deps.get_current_user)):
    return current_user
