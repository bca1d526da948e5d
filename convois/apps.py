from django.apps import AppConfig


class ConvoisConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'convois'
    verbose_name = "Convois du Mawlid"

    def ready(self):
        import convois.signals
