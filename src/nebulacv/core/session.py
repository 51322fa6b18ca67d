from __future__ import annotations

from dataclasses import dataclass, replace
from urllib.parse import urlencode

from nebulacv.types import Plan

PROTECTED_PREFIXES: tuple[str, ...] = ("/builder", "/tracker", "/settings", "/dashboard")
AUTH_PREFIXES: tuple[str, ...] = ("/login", "/signup")
LOGIN_PATH = "/login"
HOME_PATH = "/dashboard"


@dataclass(slots=True, frozen=True)
class SessionContext:
    """Identity of the signed-in user, resolved once per request.

    Handlers receive it explicitly; nothing about the user is kept at module level.
    """

    user_id: str
    email: str = ""
    plan: Plan = "free"

    @property
    def is_pro(self) -> bool:
        return self.plan == "pro"

    def with_plan(self, plan: Plan) -> "SessionContext":
        return replace(self, plan=plan)


def is_protected(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in PROTECTED_PREFIXES)


def is_auth_page(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in AUTH_PREFIXES)


def login_url(path: str) -> str:
    return f"{LOGIN_PATH}?{urlencode({'redirectTo': path})}"


def guard_redirect(path: str, session: SessionContext | None) -> str | None:
    """Return where to redirect for ``path``, or None when the request may proceed."""
    if is_protected(path) and session is None:
        return login_url(path)
    if is_auth_page(path) and session is not None:
        return HOME_PATH
    return None


def post_login_target(redirect_to: str | None) -> str:
    if redirect_to and redirect_to.startswith("/") and not redirect_to.startswith("//"):
        return redirect_to
    return HOME_PATH
