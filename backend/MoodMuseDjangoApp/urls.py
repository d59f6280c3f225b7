# MoodMuseDjangoApp/urls.py
from django.urls import path
from . import views as root_views
from .moodboard import views as moodboard_views

urlpatterns = [
    path("health/", root_views.health, name="health"),
    path("moodboards/", moodboard_views.moodboard_create, name="moodboard_create"),
    path("moodboards/save/", moodboard_views.moodboard_save, name="moodboard_save"),
    path("board/<str:moodboard_id>/", moodboard_views.moodboard_detail, name="moodboard_detail"),
]
