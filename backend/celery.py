import os
from celery import Celery
from celery.schedules import crontab

# Configuration Django pour Celery
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.settings')

app = Celery('convois_backend')

# Configuration Celery depuis Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')

# Découverte automatique des tâches
app.autodiscover_tasks()

# Configuration des tâches périodiques
app.conf.beat_schedule = {
    'recalculer-statuts-edition-active': {
        'task': 'convois.tasks.recalculer_statuts_edition_active',
        'schedule': crontab(minute='*/15'),  # Toutes les 15 minutes
    },
    'nettoyer-anciennes-notifications': {
        'task': 'convois.tasks.nettoyer_anciennes_notifications',
        'schedule': crontab(minute=0, hour=3),  # Tous les jours à 3h
    },
}
