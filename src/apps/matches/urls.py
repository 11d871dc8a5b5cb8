from django.urls import path

from . import views

app_name = "matches"

urlpatterns = [
    path("club/<str:club_id>/", views.club_schedule, name="schedule"),
    path("club/<str:club_id>/matches/", views.save_matches_view, name="save_matches"),
    path("club/<str:club_id>/<str:match_id>/assign/", views.assign_referee_view, name="assign"),
    path(
        "club/<str:club_id>/<str:match_id>/unassign/",
        views.unassign_referee_view,
        name="unassign",
    ),
]
