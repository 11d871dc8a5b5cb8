from django.contrib import admin, messages

from .models import Postulation, PostulationMatch


class PostulationMatchInline(admin.TabularInline):
    model = PostulationMatch
    extra = 0
    raw_id_fields = ("match",)


@admin.register(Postulation)
class PostulationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "club", "status", "has_car", "submitted_at")
    list_filter = ("status", "has_car", "club")
    search_fields = ("id", "user__username", "club__name")
    inlines = [PostulationMatchInline]
    actions = ["mark_completed"]

    @admin.action(description="Mark selected postulations as completed")
    def mark_completed(self, request, queryset):
        updated = queryset.filter(status=Postulation.Status.PENDING).update(
            status=Postulation.Status.COMPLETED
        )
        messages.success(request, f"Completed {updated} postulations.")
