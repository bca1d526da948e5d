from celery import shared_task
import logging

from .models import Deplacement, EditionMawlid
from .notifications import nettoyer_notifications_lues
from .services import mettre_a_jour_statut_deplacement

logger = logging.getLogger(__name__)


@shared_task
def nettoyer_anciennes_notifications():
    """
    Tâche Celery supprimant les notifications lues de plus de 30 jours
    Exécutée tous les jours à 3h
    """
    nombre = nettoyer_notifications_lues()
    logger.info(f"🧹 {nombre} anciennes notifications supprimées")
    return f"{nombre} notifications supprimées"


@shared_task
def recalculer_statuts_edition_active():
    """
    Recalcule le statut de tous les déplacements de l'édition active.
    Rattrape les écritures faites hors de l'API (admin, imports).
    """
    edition = EditionMawlid.active()
    if not edition:
        logger.info("Aucune édition active, recalcul ignoré")
        return "Aucune édition active"

    recalcules = 0
    for deplacement_id in Deplacement.objects.filter(edition=edition).values_list('id', flat=True):
        if mettre_a_jour_statut_deplacement(deplacement_id) is not None:
            recalcules += 1

    logger.info(f"🔄 {recalcules} déplacements recalculés pour l'édition {edition.annee}")
    return f"{recalcules} déplacements recalculés"
