from typing import Optional

from starlette.requests import Request

from taste_trail.shared.utils.security import decode_token


def _extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get("accessToken")


async def auth_middleware(request: Request, call_next):
    """
    Attach verified token claims to request.state.claims.

    The signature and expiry are always checked, cookie or header alike.
    Nothing is rejected here: routes enforce authentication through their
    dependencies, public routes read the claims for viewer context only.
    """
    token = _extract_token(request)
    request.state.claims = decode_token(token) if token else None
    return await call_next(request)
