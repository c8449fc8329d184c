"""
URL configuration for the assessment backend.

- /admin/: Django admin (Jazzmin)
- /api/token/, /api/token/refresh/: JWT pair and refresh
- /api/: assessment API (see ``assessment.urls``)
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/", include("assessment.urls")),
]
