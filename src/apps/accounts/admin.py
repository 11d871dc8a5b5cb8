from django.contrib import admin

from .models import Club, ClubMembership, Suggestion


class ClubMembershipInline(admin.TabularInline):
    model = ClubMembership
    extra = 0
    raw_id_fields = ("user",)


@admin.register(Club)
class ClubAdmin(admin.ModelAdmin):
    list_display = ("name", "id", "created_at")
    search_fields = ("name", "id")
    readonly_fields = ("id",)
    inlines = [ClubMembershipInline]


@admin.register(ClubMembership)
class ClubMembershipAdmin(admin.ModelAdmin):
    list_display = ("user", "club", "role", "joined_at")
    list_filter = ("role", "club")
    search_fields = ("user__username", "club__name")


@admin.register(Suggestion)
class SuggestionAdmin(admin.ModelAdmin):
    list_display = ("user_name", "submitted_at", "text")
    search_fields = ("user_name", "text")
    readonly_fields = ("id", "user", "user_name", "submitted_at")
