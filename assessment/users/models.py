"""
Assessment User Models

Extends Django's built-in User with a profile that carries the user's role.
Roles are a closed set of choices; every role must appear in the capability
table so that adding a role is a visible, checked change.

Models:
- Profile: role assignment for a user account

Author: Assessment Backend Team
Version: 1.0.0
"""

from enum import Enum
from typing import Dict, FrozenSet

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    ADMIN = "ADMIN", _("Administrator")
    TEACHER = "TEACHER", _("Teacher")
    STUDENT = "STUDENT", _("Student")


class Capability(Enum):
    """Actions guarded by role checks."""

    TAKE_TESTS = "take_tests"
    MANAGE_TESTS = "manage_tests"
    MANAGE_SESSIONS = "manage_sessions"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(
        {
            Capability.MANAGE_TESTS,
            Capability.MANAGE_SESSIONS,
            Capability.MANAGE_USERS,
        }
    ),
    Role.TEACHER: frozenset({Capability.MANAGE_TESTS}),
    Role.STUDENT: frozenset({Capability.TAKE_TESTS}),
}

_unmapped_roles = set(Role) - set(ROLE_CAPABILITIES)
if _unmapped_roles:
    raise ImproperlyConfigured(
        f"Roles without capabilities: {sorted(r.value for r in _unmapped_roles)}"
    )


def capabilities_for(role: str) -> FrozenSet[Capability]:
    """
    Resolve the capabilities of a role value.

    Raises:
        ValueError: if the value is not one of the known roles
    """
    return ROLE_CAPABILITIES[Role(role)]


class Profile(models.Model):
    """
    Per-user profile holding the user's role.

    The profile is created automatically when a user account is created.
    Superusers are always treated as administrators, whatever role is stored.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
    )
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.STUDENT,
        verbose_name=_("Role"),
    )

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "assessment_profile"

    def __str__(self) -> str:
        return f"{self.user.username} ({self.role})"

    @property
    def effective_role(self) -> Role:
        if self.user.is_superuser:
            return Role.ADMIN
        return Role(self.role)

    def has_capability(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES[self.effective_role]


def get_profile(user) -> Profile:
    """Return the user's profile, creating it for accounts that predate the signal."""
    profile, _created = Profile.objects.get_or_create(user=user)
    return profile


# --- Signal Handlers ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    if created:
        Profile.objects.get_or_create(user=instance)
