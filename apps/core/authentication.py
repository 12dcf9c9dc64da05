"""
JWT Authentication for Django REST Framework

Validates bearer tokens and attaches the calling principal to requests.
Token issuance lives outside this service.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

import jwt
from django.conf import settings
from rest_framework import authentication, exceptions

from .models import Principal, Role

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    """
    Represents the caller of an operation.

    This is NOT a Django User model - it's a lightweight container
    for caller identity derived from the token and principals table.
    """
    id: UUID
    role: str                     # 'admin', 'agent', 'sub-agent', 'user'
    email: str = ''
    name: str | None = None
    is_approved: bool = True
    is_active: bool = True
    parent_id: UUID | None = None

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_principal(cls, principal: Principal) -> 'AuthenticatedUser':
        return cls(
            id=principal.id,
            role=principal.role,
            email=principal.email,
            name=principal.name,
            is_approved=principal.is_approved,
            is_active=principal.is_active,
            parent_id=principal.parent_id,
        )


class PrincipalJWTAuthentication(authentication.BaseAuthentication):
    """
    Authenticates requests using HS256 JWTs whose sub claim is a principal id.

    Flow:
    1. Extract Bearer token from Authorization header
    2. Decode and validate JWT using AUTH_JWT_SECRET
    3. Look up the principal by id (sub claim)
    4. Reject disabled principals and agents still awaiting approval
    """

    def authenticate(self, request):
        """
        Authenticate the request and return (user, token) or None.

        Raises:
            AuthenticationFailed: If credentials are invalid
        """
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header.startswith('Bearer '):
            return None

        token = auth_header[7:]  # Remove 'Bearer ' prefix
        if not token:
            return None

        payload = self._decode_jwt(token)
        if not payload:
            raise exceptions.AuthenticationFailed('Invalid or expired token')

        user = self._get_user_from_payload(payload)
        if not user:
            raise exceptions.AuthenticationFailed('User not found')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('Account is disabled')

        if user.role in (Role.AGENT, Role.SUB_AGENT) and not user.is_approved:
            raise exceptions.AuthenticationFailed('Account pending approval')

        return (user, token)

    def authenticate_header(self, request):
        """
        Return the WWW-Authenticate header value for 401 responses.
        """
        return 'Bearer realm="api"'

    def _decode_jwt(self, token: str) -> dict | None:
        jwt_secret = getattr(settings, 'AUTH_JWT_SECRET', None)

        if not jwt_secret:
            logger.error('AUTH_JWT_SECRET not configured')
            return None

        try:
            return jwt.decode(
                token,
                jwt_secret,
                algorithms=settings.AUTH_JWT_ALGORITHMS,
                options={'verify_exp': True, 'require': ['sub']},
            )
        except jwt.ExpiredSignatureError:
            logger.debug('JWT has expired')
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f'JWT validation failed: {e}')
            return None

    def _get_user_from_payload(self, payload: dict) -> AuthenticatedUser | None:
        try:
            principal_id = UUID(str(payload['sub']))
        except ValueError:
            logger.warning('JWT sub claim is not a principal id')
            return None

        principal = Principal.objects.filter(id=principal_id).first()
        if principal is None:
            logger.warning(f'No principal found for id: {principal_id}')
            return None

        return AuthenticatedUser.from_principal(principal)


def get_user_context(request) -> AuthenticatedUser | None:
    """
    Utility function to get authenticated user from request.

    Use this in views that need user context.
    """
    user = getattr(request, 'user', None)
    if isinstance(user, AuthenticatedUser):
        return user
    return None
