from django.urls import path
from . import views

urlpatterns = [
    path('find-best-image', views.FindBestImageView.as_view(), name='find_best_image'),
    path('validate-image', views.ValidateImageView.as_view(), name='validate_image'),
    path('validate-category', views.ValidateCategoryView.as_view(), name='validate_category'),
    path('find-better-image', views.FindBetterImageView.as_view(), name='find_better_image'),
    path('validate-family-category', views.ValidateFamilyCategoryView.as_view(), name='validate_family_category'),
    path('image-pipeline/health', views.HealthView.as_view(), name='image_pipeline_health'),
]
