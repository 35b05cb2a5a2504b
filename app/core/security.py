from dataclasses import dataclass, field

import httpx
from fastapi import Depends, Header, HTTPException, status

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    name: str
    login: str
    token: str
    permissions: tuple[str, ...] = field(default_factory=tuple)


class AuthClient:
    """Resolves a token against the auth service (GET /users/current)."""

    def __init__(self, base_url: str, timeout_seconds: float = 5.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def current_user(self, token: str) -> CurrentUser | None:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get("/users/current", headers={"Authorization": token})
        except httpx.HTTPError as e:
            logger.warning("Auth service unreachable: %s", e)
            return None

        if response.status_code != 200:
            return None

        try:
            data = response.json()
            return CurrentUser(
                id=str(data["id"]),
                name=data.get("name", ""),
                login=data.get("login", ""),
                token=token,
                permissions=tuple(data.get("permissions") or ()),
            )
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.warning("Auth service returned an unexpected user payload")
            return None


def get_auth_client() -> AuthClient:
    return AuthClient(settings.AUTH_SERVER_URL)


async def get_current_user(
    authorization: str | None = Header(default=None),
    auth: AuthClient = Depends(get_auth_client),
) -> CurrentUser:
    """
    Pass the token issued by the auth service in the Authorization header.
    Example: Authorization: bearer eyJhbGciOi...
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )

    user = await auth.current_user(authorization)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user
