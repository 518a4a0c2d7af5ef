from django.apps import AppConfig


class ImagePipelineConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'image_pipeline'
    verbose_name = 'Vocabulary Image Pipeline'
