from typing import Optional, Callable
from fastapi import Depends, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.config.settings import settings
from app.utils.auth import AuthUtils
from app.utils.context import set_username
from app.utils.errors import AuthenticationError, AuthorizationError
from app.utils.responses import ResponseBuilder
from app.utils.logging import get_logger

logger = get_logger()


class AuthState:
    """Authentication state to be stored in request.state"""

    def __init__(
        self,
        user_id: int,
        username: str,
        role: str,
        student_id: Optional[int] = None,
        is_authenticated: bool = True,
    ):
        self.user_id = user_id
        self.username = username
        self.role = role
        self.student_id = student_id
        self.is_authenticated = is_authenticated


class AuthMiddleware(BaseHTTPMiddleware):
    """Authentication middleware for JWT bearer token validation"""

    # Paths that don't require authentication
    EXCLUDED_PATHS = {
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
        f"{settings.API_PREFIX}/shared/auth/login",
        f"{settings.API_PREFIX}/shared/auth/register",
        f"{settings.API_PREFIX}/shared/health",
    }

    def __init__(self, app, excluded_paths: Optional[set] = None):
        super().__init__(app)
        self.excluded_paths = set(self.EXCLUDED_PATHS)
        if excluded_paths:
            self.excluded_paths.update(excluded_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request through authentication middleware"""
        if self._should_skip_auth(request):
            return await call_next(request)

        auth_state = self._authenticate_request(request)
        if not auth_state:
            return ResponseBuilder.error(
                request=request,
                message="Invalid or expired authentication",
                error_code="UNAUTHORIZED",
                status_code=401,
            )

        request.state.auth = auth_state
        set_username(auth_state.username)
        return await call_next(request)

    def _should_skip_auth(self, request: Request) -> bool:
        """Check if the request should skip authentication."""
        return request.method == "OPTIONS" or self._is_excluded_path(request.url.path)

    def _is_excluded_path(self, path: str) -> bool:
        """Check if path is excluded from authentication"""
        return any(path.startswith(excluded) for excluded in self.excluded_paths)

    def _authenticate_request(self, request: Request) -> Optional[AuthState]:
        """Decode the bearer token and build the auth state from its claims"""
        token = AuthUtils.extract_bearer_token(request.headers.get("authorization"))
        if not token:
            return None

        payload = AuthUtils.verify_access_token(token)
        if not payload:
            logger.warning("Rejected invalid or expired access token")
            return None

        user_id = payload.get("sub")
        username = payload.get("username")
        role = payload.get("role")

        if not all([user_id, username, role]):
            return None

        student_id = payload.get("student_id")
        return AuthState(
            user_id=int(user_id),
            username=str(username),
            role=str(role),
            student_id=int(student_id) if student_id is not None else None,
        )


# Dependency for getting current user from request state
def get_current_user(request: Request) -> AuthState:
    """Dependency to get current authenticated user from request state"""
    auth_state = getattr(request.state, "auth", None)

    if not auth_state or not auth_state.is_authenticated:
        raise AuthenticationError("Not authenticated", "NOT_AUTHENTICATED")

    return auth_state


# Dependency for requiring specific roles
def require_role(*allowed_roles: str):
    """Create dependency that requires specific user roles"""

    def check_role(
        current_user: AuthState = Depends(get_current_user),
    ) -> AuthState:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                "Insufficient permissions", "INSUFFICIENT_PERMISSIONS"
            )
        return current_user

    return check_role


# Pre-defined dependencies for common roles
require_student = require_role("Student")
require_admin = require_role("Admin")
