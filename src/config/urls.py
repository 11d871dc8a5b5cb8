from django.contrib import admin
from django.urls import include, path

from apps.postulations.views import availability

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", availability, name="home"),
    path("accounts/", include("apps.accounts.urls")),
    path("matches/", include("apps.matches.urls")),
    path("postulations/", include("apps.postulations.urls")),
]
