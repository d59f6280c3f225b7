from django.contrib import admin

from .models import SharedMoodboard


@admin.register(SharedMoodboard)
class SharedMoodboardAdmin(admin.ModelAdmin):
    list_display = ("id", "original_mood", "view_count", "created_at")
    search_fields = ("id", "original_mood")
    readonly_fields = ("id", "view_count", "created_at")
    ordering = ("-created_at",)
