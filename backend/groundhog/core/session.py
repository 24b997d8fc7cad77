"""Farm identity carried by the ``farm_id`` cookie.

Every farm-scoped endpoint receives a :class:`FarmSession` instead of reading
the cookie itself. A session without a farm id is a valid, typed state; the
endpoints that need a farm depend on :func:`require_farm_session`.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response

from groundhog.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FarmSession:
    farm_id: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.farm_id is None

    @classmethod
    def anonymous(cls) -> "FarmSession":
        return cls(farm_id=None)


def slugify_farm_name(name: str) -> str:
    return name.strip().lower().replace(" ", "_")


def get_farm_session(request: Request) -> FarmSession:
    raw = request.cookies.get(settings.session_cookie_name, "")
    farm_id = raw.strip()
    if not farm_id:
        return FarmSession.anonymous()
    return FarmSession(farm_id=farm_id)


def require_farm_session(session: FarmSession = Depends(get_farm_session)) -> FarmSession:
    if session.is_anonymous:
        logger.info("Request rejected: no farm id in session cookie")
        raise HTTPException(status_code=401, detail="No farm selected. Log in with a farm id first.")
    return session


def set_session_cookie(response: Response, farm_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=farm_id,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name)
