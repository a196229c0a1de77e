from typing import List

from fastapi import APIRouter, Depends, Form, Request

from ..core.config import ROLE_MAP, logger
from ..core.security import get_current_user, require_admin
from ..db.store import OrgStore, get_store
from ..schemas.user import User
from ..services import auth_service

router = APIRouter()


@router.post("/login")
def login_submit(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    store: OrgStore = Depends(get_store),
):
    request.session.clear()
    # AuthError is turned into a 401 by the app's exception handler
    user = auth_service.login(store.projection, username.strip(), password)

    request.session["user"] = {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "name": user.staff_name,
    }
    return {
        "status": "success",
        "role": user.role,
        "roleName": ROLE_MAP.get(user.role, user.role),
        "user": user.model_dump(by_alias=True),
    }


@router.post("/logout")
def logout(request: Request):
    user = request.session.get("user") or {}
    request.session.clear()
    if user:
        logger.info(f"[AUTH] '{user.get('username')}' logged out.")
    return {"status": "success"}


@router.get("/api/me", response_model=User)
def read_me(user: User = Depends(get_current_user)):
    return user


@router.get("/api/users", response_model=List[User])
def list_users(
    _: User = Depends(require_admin),
    store: OrgStore = Depends(get_store),
):
    """Every login currently derived from the staff list."""
    return store.projection.users
