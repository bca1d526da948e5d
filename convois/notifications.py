"""
Système de notifications pour le suivi des convois
- Notifications enregistrées en base pour chaque destinataire
- Diffusion aux Super Admins actifs par défaut
- Logs détaillés
"""

import logging
from datetime import timedelta
from typing import List, Optional

from django.utils import timezone

from .models import Car, Deplacement, Incident, Notification, Utilisateur

logger = logging.getLogger(__name__)

# Les notifications lues sont conservées 30 jours
DUREE_CONSERVATION_JOURS = 30


class NotificationService:
    """Service de notifications pour les cars et déplacements"""

    def destinataires_par_defaut(self) -> List[Utilisateur]:
        return list(
            Utilisateur.objects.filter(role=Utilisateur.ROLE_SUPER_ADMIN, is_active=True)
        )

    def notifier(self, type_notification: str, titre: str, message: str,
                 car: Car = None, deplacement: Deplacement = None,
                 incident: Incident = None,
                 destinataire: Optional[Utilisateur] = None) -> List[Notification]:
        """
        Crée une notification par destinataire. Sans destinataire explicite,
        la notification est envoyée à tous les Super Admins actifs.
        """
        destinataires = [destinataire] if destinataire else self.destinataires_par_defaut()

        notifications = [
            Notification.objects.create(
                type=type_notification,
                titre=titre,
                message=message,
                car=car,
                deplacement=deplacement,
                incident=incident,
                destinataire=dest,
            )
            for dest in destinataires
        ]

        logger.info(f"{len(notifications)} notification(s) créée(s) - {type_notification}")
        return notifications

    def incident_signale(self, incident: Incident):
        """
        Notifie le signalement d'un incident sur un car
        """
        try:
            car = incident.car
            self.notifier(
                Notification.TYPE_INCIDENT,
                titre=f"Incident sur le car {car.numero_car}",
                message=(
                    f"{incident.get_type_incident_display()} signalé pour la section "
                    f"{car.deplacement.section.nom}: {incident.description}"
                ),
                car=car,
                deplacement=car.deplacement,
                incident=incident,
            )
        except Exception as e:
            logger.error(f"Erreur lors de la notification d'incident: {e}")

    def retard_detecte(self, car: Car):
        """
        Notifie qu'un car dépasse la durée de trajet tolérée
        """
        try:
            self.notifier(
                Notification.TYPE_RETARD,
                titre=f"Retard du car {car.numero_car}",
                message=f"Durée de trajet de {car.duree_trajet_minutes} minutes pour le car {car.numero_car}",
                car=car,
                deplacement=car.deplacement,
            )
        except Exception as e:
            logger.error(f"Erreur lors de la notification de retard: {e}")

    def arrivee_complete(self, deplacement: Deplacement):
        """
        Notifie que tous les cars d'un déplacement sont arrivés
        """
        try:
            self.notifier(
                Notification.TYPE_ARRIVEE_COMPLETE,
                titre=f"Déplacement {deplacement.type} terminé",
                message=f"Tous les cars de la section {deplacement.section.nom} sont arrivés",
                deplacement=deplacement,
            )
        except Exception as e:
            logger.error(f"Erreur lors de la notification d'arrivée complète: {e}")


def nettoyer_notifications_lues(jours: int = DUREE_CONSERVATION_JOURS) -> int:
    """Supprime les notifications lues plus anciennes que la durée de conservation"""
    date_limite = timezone.now() - timedelta(days=jours)
    nombre, _ = Notification.objects.filter(date_creation__lt=date_limite, is_read=True).delete()
    return nombre
