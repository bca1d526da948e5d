"""
Logique dérivée des convois : durée de trajet des cars et statut agrégé
des déplacements
"""
import logging
from typing import Iterable, Optional

from django.db import DatabaseError, transaction

from .models import Car, Deplacement

logger = logging.getLogger(__name__)

# Au-delà de 6 heures de trajet, le car est signalé en retard
SEUIL_RETARD_MINUTES = 360

STATUTS_ARRIVES = frozenset({
    Car.STATUT_ARRIVE_TIVAOUANE,
    Car.STATUT_ARRIVE_MBOUR,
})

STATUTS_DEMARRES = frozenset({
    Car.STATUT_EN_ROUTE,
    Car.STATUT_EN_ROUTE_MBOUR,
    Car.STATUT_ARRIVE_TIVAOUANE,
    Car.STATUT_A_TIVAOUANE,
})


def calculer_duree_trajet(car: Car) -> None:
    """
    Met à jour duree_trajet_minutes et alerte_retard à partir des heures
    effectives de départ et d'arrivée.

    Sans l'une des deux heures, les champs dérivés restent inchangés.
    L'alerte n'est jamais remise à False une fois levée.
    """
    depart = car.heure_depart_effective
    arrivee = car.heure_arrivee_effective
    if not depart or not arrivee:
        return

    car.duree_trajet_minutes = int((arrivee - depart).total_seconds() // 60)
    if car.duree_trajet_minutes > SEUIL_RETARD_MINUTES:
        car.alerte_retard = True


def deriver_statut_deplacement(statuts_cars: Iterable[str]) -> str:
    """
    Calcule le statut d'un déplacement à partir des statuts temps réel de
    ses cars. L'ordre des vérifications est significatif : incident, puis
    tous arrivés, puis au moins un démarré.
    """
    statuts = list(statuts_cars)

    if not statuts:
        return Deplacement.STATUT_NON_COMMENCE

    if Car.STATUT_INCIDENT in statuts:
        return Deplacement.STATUT_INCIDENT

    if all(statut in STATUTS_ARRIVES for statut in statuts):
        return Deplacement.STATUT_TERMINE

    if any(statut in STATUTS_DEMARRES for statut in statuts):
        return Deplacement.STATUT_EN_COURS

    return Deplacement.STATUT_NON_COMMENCE


def mettre_a_jour_statut_deplacement(deplacement_id: int) -> Optional[str]:
    """
    Recalcule et enregistre le statut d'un déplacement selon ses cars.

    La lecture des cars et l'écriture du statut se font dans une même
    transaction, avec verrou sur la ligne du déplacement. Les erreurs sont
    journalisées et ne remontent jamais à l'appelant : retourne None en cas
    d'échec, le nouveau statut sinon.
    """
    try:
        with transaction.atomic():
            deplacement = Deplacement.objects.select_for_update().get(pk=deplacement_id)
            statuts = Car.objects.filter(deplacement_id=deplacement_id).values_list(
                'statut_temps_reel', flat=True
            )
            deplacement.statut = deriver_statut_deplacement(statuts)
            deplacement.save(update_fields=['statut', 'date_modification'])

        logger.info(
            f"✅ Statut du déplacement {deplacement_id} mis à jour automatiquement: "
            f"{deplacement.get_statut_display()}"
        )
        return deplacement.statut

    except Deplacement.DoesNotExist:
        logger.error(f"❌ Erreur mise à jour statut déplacement {deplacement_id}: déplacement introuvable")
    except DatabaseError as e:
        logger.error(f"❌ Erreur mise à jour statut déplacement {deplacement_id}: {e}")
    return None


def progression_arrivees(deplacement_id: int) -> dict:
    """Compte les cars arrivés d'un déplacement"""
    cars = Car.objects.filter(deplacement_id=deplacement_id)
    total = cars.count()
    arrives = cars.filter(heure_arrivee_effective__isnull=False).count()
    return {
        'total': total,
        'arrives': arrives,
        'tous_arrives': total > 0 and total == arrives,
        'progression': f"{arrives}/{total}",
    }
