from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from supabase import Client

from app.core.config import get_settings
from app.core.security import (
    SUPERVISOR_ROLE,
    decode_access_token,
    supervisor_profile,
)
from app.crud.booking import BookingRepository, SupabaseBookingRepository
from app.db.base import get_supabase

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    """Resolve the supervisor session from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        username: str | None = payload.get("sub")
        if username is None or payload.get("role") != SUPERVISOR_ROLE:
            raise credentials_exception
    except (JWTError, ValueError):
        raise credentials_exception

    if username != get_settings().supervisor_username:
        raise credentials_exception

    return supervisor_profile(username)


def get_booking_repository(
    client: Client = Depends(get_supabase),
) -> BookingRepository:
    return SupabaseBookingRepository(client, get_settings().bookings_table)
