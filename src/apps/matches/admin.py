from django.contrib import admin

from .models import Match, MatchAssignment


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ("description", "club", "date", "time", "location", "status")
    list_filter = ("status", "club")
    search_fields = ("id", "description", "location")
    date_hierarchy = "date"


@admin.register(MatchAssignment)
class MatchAssignmentAdmin(admin.ModelAdmin):
    list_display = ("match", "referee", "club", "assigned_at")
    list_filter = ("club",)
    search_fields = ("match__description", "referee__username")
    raw_id_fields = ("match", "referee")

    # Assignments are only written through assign_referee.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
