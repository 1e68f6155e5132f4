"""
DRF authentication and permissions for JWT bearer tokens.

Tokens are issued by the auth service (outside this backend); here they are
only verified.
"""
import jwt
from rest_framework import authentication, exceptions, permissions
from django.conf import settings


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Authorization header format:
    - Bearer <jwt_token>

    Claims: ``user_id`` (required), ``exp``.
    """

    def authenticate(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION', '')

        if not auth_header.startswith('Bearer '):
            return None

        token = auth_header[7:]  # Remove 'Bearer ' prefix

        if not token:
            return None

        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=['HS256']
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token expired')
        except jwt.InvalidTokenError:
            raise exceptions.AuthenticationFailed('Missing or invalid token')

        user_id = payload.get('user_id')
        if not user_id:
            raise exceptions.AuthenticationFailed('Missing or invalid token')

        from apps.users.models import User

        try:
            user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise exceptions.AuthenticationFailed('Missing or invalid token')

        if not user.is_active:
            raise exceptions.AuthenticationFailed('Account is disabled')

        return (user, token)

    def authenticate_header(self, request):
        return 'Bearer'


class IsCoach(permissions.BasePermission):
    """Client-management endpoints are coach-only."""

    message = 'Coach role required'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and getattr(request.user, 'is_coach', False))
