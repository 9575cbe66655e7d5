from __future__ import annotations

from rest_framework import permissions

from .auth import is_authorized, resolve_principal


class HasCapability(permissions.BasePermission):
    """
    Grants access when the caller's role carries the capability the view declares.

    Views set either `required_capability` or a per-method `required_capabilities`
    mapping. Team principals are limited to their own team.
    """

    message = "not allowed"

    def has_permission(self, request, view):
        principal = resolve_principal(request.user)
        if principal is None:
            return False
        by_method = getattr(view, "required_capabilities", None) or {}
        action = by_method.get(request.method) or getattr(view, "required_capability", None)
        return is_authorized(principal, action, team_id=principal.team_id)
