from __future__ import annotations

from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .auth import ROLES, Principal


class PrincipalTokenAuthentication(BaseAuthentication):
    """
    Bearer access tokens minted by apps.core.auth.issue_token.
    The token carries the role (and team id for team sessions); no user row is looked up.
    """

    keyword = b"bearer"

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword:
            return None
        if len(parts) != 2:
            raise AuthenticationFailed("invalid token header")
        try:
            token = AccessToken(parts[1].decode("utf-8"))
        except (TokenError, UnicodeError):
            raise AuthenticationFailed("invalid or expired token")

        role = token.get("role")
        if role not in ROLES:
            raise AuthenticationFailed("invalid token")
        principal = Principal(role=role, team_id=token.get("team_id"), user_id=token.get("user_id"))
        return principal, token

    def authenticate_header(self, request):
        return 'Bearer realm="api"'
