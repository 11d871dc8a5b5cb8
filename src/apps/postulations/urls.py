from django.urls import path

from . import views

app_name = "postulations"

urlpatterns = [
    path("", views.availability, name="availability"),
    path("club/<str:club_id>/submit/", views.submit_postulation_view, name="submit"),
    path("<str:pk>/update/", views.update_postulation_view, name="update"),
    path("<str:pk>/complete/", views.complete_postulation_view, name="complete"),
]
