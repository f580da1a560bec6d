"""
Superadmin session cookie.

The cookie value is the configured SUPERADMIN_AUTH_TOKEN itself: there is
one superadmin identity and one shared bearer value, no per-login session.
"""

from typing import Optional

from fastapi import Request, Response

SUPERADMIN_COOKIE_NAME = "superadmin_token"
SUPERADMIN_COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 1 week
SUPERADMIN_COOKIE_PATH = "/"


class SessionCookieManager:
    """Sets, reads and clears the superadmin cookie."""

    def __init__(self, name: str = SUPERADMIN_COOKIE_NAME):
        self.name = name

    def issue(self, response: Response, secret: str, is_production: bool) -> None:
        """Attach the session cookie carrying `secret` to the response."""
        response.set_cookie(
            key=self.name,
            value=secret,
            max_age=SUPERADMIN_COOKIE_MAX_AGE,
            path=SUPERADMIN_COOKIE_PATH,
            secure=is_production,
            httponly=True,
            samesite="lax",
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(key=self.name, path=SUPERADMIN_COOKIE_PATH)

    def read(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.name)


session_cookies = SessionCookieManager()
