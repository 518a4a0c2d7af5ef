"""
URL configuration for the vocabulary image backend.

All image endpoints live directly under ``/api/`` to match the paths the
client already calls.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('image_pipeline.urls')),
]
