from django.apps import AppConfig


class MdviewConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'mdview'
    verbose_name = 'Markdown viewer'
