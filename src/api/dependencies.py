"""FastAPI dependency injection helpers."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from src.domain.entities import User
from src.services.session import CatalogSession


async def get_catalog(request: Request) -> CatalogSession:
    """The app-wide catalog session, loaded on first use if startup failed."""
    catalog: CatalogSession = request.app.state.catalog
    await catalog.ensure_loaded()
    return catalog


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
) -> Optional[User]:
    """Identity forwarded by the upstream identity gateway, if any."""
    if not x_user_id:
        return None
    return User(id=x_user_id, email=x_user_email or "", display_name=x_user_name)


async def require_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    if user is None:
        raise HTTPException(
            status_code=401, detail="Please sign in to change rides."
        )
    return user
