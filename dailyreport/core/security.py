from fastapi import Depends, HTTPException, Request

from ..db.store import OrgStore, get_store
from ..schemas.user import User
from .config import logger


def get_session_user(request: Request, store: OrgStore) -> User:
    """
    Logged-in user, resolved against the current login projection so that a
    role or designation change applies on the next request. A session whose
    login no longer exists (staff deleted or code changed) is cleared.
    """
    username = (request.session.get("user") or {}).get("username")
    if not username:
        raise HTTPException(status_code=401, detail="Not logged in.")

    user = next((u for u in store.projection.users if u.username == username), None)
    if user is None:
        logger.info(f"[AUTH] Session for '{username}' no longer matches a login; cleared.")
        request.session.clear()
        raise HTTPException(status_code=401, detail="Session expired. Please log in again.")
    return user


def get_current_user(request: Request, store: OrgStore = Depends(get_store)) -> User:
    return get_session_user(request, store)


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=403, detail="You do not have permission to perform this action.")
    return user
