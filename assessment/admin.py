"""
Assessment Application Django Admin Configuration

Admin views for roles, the test catalog and exam sessions. Sessions and
answers are read-only here: their state only changes through the exam session
engine.

Author: Assessment Backend Team
Version: 1.0.0
"""

from typing import Optional

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import (
    Answer,
    Course,
    Profile,
    Question,
    QuestionBank,
    SchoolClass,
    Test,
    TestSession,
)

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "Role"
    fk_name = "user"
    fields = ("role",)

    def get_extra(self, request: HttpRequest, obj: Optional[User] = None, **kwargs) -> int:
        return 0


class UserAdmin(BaseUserAdmin):
    """User administration with the role shown and filterable."""

    inlines = (ProfileInline,)
    list_display = ("username", "email", "first_name", "last_name", "get_role", "is_active")
    list_select_related = ("profile",)
    list_filter = ("is_staff", "is_superuser", "is_active", "profile__role")
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("username",)

    @admin.display(description=_("Role"))
    def get_role(self, instance: User) -> Optional[str]:
        try:
            return instance.profile.get_role_display()
        except Profile.DoesNotExist:
            return None


admin.site.unregister(User)
admin.site.register(User, UserAdmin)

# --- Catalog Administration ---


class SchoolClassInline(admin.TabularInline):
    model = SchoolClass
    extra = 0
    fields = ("name",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "created_by", "created_at")
    search_fields = ("code", "title")
    inlines = [SchoolClassInline]


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ("name", "course")
    list_filter = ("course",)
    filter_horizontal = ("students",)


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 1
    fields = ("text", "options", "answer", "marks")


@admin.register(QuestionBank)
class QuestionBankAdmin(admin.ModelAdmin):
    list_display = ("name", "course", "question_count", "created_at")
    search_fields = ("name",)
    inlines = [QuestionInline]

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(_question_count=Count("questions"))

    @admin.display(description=_("Questions"), ordering="_question_count")
    def question_count(self, obj: QuestionBank) -> int:
        return obj._question_count


@admin.register(Test)
class TestAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "bank", "active", "start_time", "end_time", "duration")
    list_filter = ("active", "course", "shuffle_questions")
    search_fields = ("title",)
    fieldsets = (
        (_("Basic Information"), {"fields": ("title", "course", "bank", "active")}),
        (_("Schedule"), {"fields": ("start_time", "end_time", "duration")}),
        (
            _("Rules"),
            {"fields": ("pass_mark", "attempts_allowed", "shuffle_questions")},
        ),
    )


# --- Exam Session Administration ---


class AnswerInline(admin.TabularInline):
    model = Answer
    extra = 0
    can_delete = False
    fields = ("question", "selected_option", "is_correct", "answered_at")
    readonly_fields = fields

    def has_add_permission(self, request: HttpRequest, obj=None) -> bool:
        return False


@admin.register(TestSession)
class TestSessionAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "test", "started_at", "ended_at", "score", "end_reason")
    list_filter = ("test", "end_reason")
    search_fields = ("student__username", "test__title")
    readonly_fields = (
        "student",
        "test",
        "started_at",
        "ended_at",
        "score",
        "question_seed",
        "end_reason",
    )
    inlines = [AnswerInline]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("student", "test")
