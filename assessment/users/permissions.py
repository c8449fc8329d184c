from rest_framework.permissions import BasePermission

from .models import Capability, get_profile

# ------------------------------------------------------------
# Role-based permissions: a view declares the capability it needs,
# the user's role decides whether it is granted.
# ------------------------------------------------------------


class HasCapability(BasePermission):
    """Grants access when the authenticated user's role carries ``capability``."""

    capability: Capability

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_profile(user).has_capability(self.capability)


class CanTakeTests(HasCapability):
    message = "Only students can take tests."
    capability = Capability.TAKE_TESTS


class CanManageSessions(HasCapability):
    message = "Only administrators can manage exam sessions."
    capability = Capability.MANAGE_SESSIONS
