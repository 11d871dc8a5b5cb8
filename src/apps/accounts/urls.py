from django.contrib.auth import views as auth_views
from django.urls import path, reverse_lazy

from . import views

app_name = "accounts"

urlpatterns = [
    path("login/", auth_views.LoginView.as_view(), name="login"),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("signup/", views.signup, name="signup"),
    path(
        "password/",
        auth_views.PasswordChangeView.as_view(
            template_name="accounts/password_change.html",
            success_url=reverse_lazy("accounts:password_change_done"),
        ),
        name="password_change",
    ),
    path(
        "password/done/",
        auth_views.PasswordChangeDoneView.as_view(
            template_name="accounts/password_change_done.html"
        ),
        name="password_change_done",
    ),
    path("me/", views.my_stats, name="stats"),
    path("clubs/new/", views.create_club_view, name="create_club"),
    path("clubs/join/", views.join_club_view, name="join_club"),
    path(
        "clubs/<str:club_id>/members/<int:user_id>/<str:action>/",
        views.member_action_view,
        name="member_action",
    ),
    path("suggestions/", views.suggestions, name="suggestions"),
    path("suggestions/new/", views.suggest, name="suggest"),
]
