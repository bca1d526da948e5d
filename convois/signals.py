"""
Signaux Django pour l'application convois
"""

import logging
from django.db.models.signals import post_delete, post_migrate, post_save
from django.dispatch import receiver

from .models import Car
from .services import mettre_a_jour_statut_deplacement

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Car)
def car_enregistre(sender, instance, created, **kwargs):
    """
    Toute écriture d'un car entraîne le recalcul du statut de son déplacement
    """
    if kwargs.get('raw'):
        return
    mettre_a_jour_statut_deplacement(instance.deplacement_id)


@receiver(post_delete, sender=Car)
def car_supprime(sender, instance, **kwargs):
    """
    La suppression d'un car peut ramener son déplacement à "Non commencé"
    """
    mettre_a_jour_statut_deplacement(instance.deplacement_id)


@receiver(post_migrate)
def setup_after_migration(sender, **kwargs):
    if sender.name == 'convois':
        logger.info("🚀 Application convois prête après migration")
