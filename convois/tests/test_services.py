from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.utils import timezone

from convois.models import Car, Deplacement, Notification
from convois.notifications import NotificationService, nettoyer_notifications_lues
from convois.services import (
    calculer_duree_trajet, deriver_statut_deplacement, mettre_a_jour_statut_deplacement,
    progression_arrivees
)
from convois.tasks import nettoyer_anciennes_notifications, recalculer_statuts_edition_active
from .base import DonneesConvoisMixin


class CalculDureeTrajetTest(TestCase):
    """Tests du calcul de la durée de trajet et de l'alerte de retard"""

    def setUp(self):
        self.depart = timezone.now() - timedelta(hours=8)

    def test_trajet_court_sans_alerte(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart + timedelta(minutes=100))
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 100)
        self.assertFalse(car.alerte_retard)

    def test_trajet_long_leve_alerte(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart + timedelta(minutes=400))
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 400)
        self.assertTrue(car.alerte_retard)

    def test_minutes_tronquees(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart + timedelta(hours=5, minutes=59, seconds=59))
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 359)
        self.assertFalse(car.alerte_retard)

    def test_seuil_exact_sans_alerte(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart + timedelta(hours=6))
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 360)
        self.assertFalse(car.alerte_retard)

    def test_sans_arrivee_champs_inchanges(self):
        car = Car(heure_depart_effective=self.depart, duree_trajet_minutes=42)
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 42)
        self.assertFalse(car.alerte_retard)

    def test_alerte_jamais_remise_a_false(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart + timedelta(hours=7))
        calculer_duree_trajet(car)
        self.assertTrue(car.alerte_retard)

        car.heure_arrivee_effective = self.depart + timedelta(hours=1)
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, 60)
        self.assertTrue(car.alerte_retard)

    def test_arrivee_avant_depart_duree_negative(self):
        car = Car(heure_depart_effective=self.depart,
                  heure_arrivee_effective=self.depart - timedelta(minutes=30))
        calculer_duree_trajet(car)
        self.assertEqual(car.duree_trajet_minutes, -30)
        self.assertFalse(car.alerte_retard)


class DerivationStatutDeplacementTest(TestCase):
    """Tests de la règle d'agrégation des statuts de cars"""

    def test_aucun_car(self):
        self.assertEqual(deriver_statut_deplacement([]), Deplacement.STATUT_NON_COMMENCE)

    def test_tous_a_mbour(self):
        statuts = [Car.STATUT_A_MBOUR, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_NON_COMMENCE)

    def test_un_car_en_route(self):
        statuts = [Car.STATUT_EN_ROUTE, Car.STATUT_A_MBOUR, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_EN_COURS)

    def test_tous_arrives(self):
        statuts = [Car.STATUT_ARRIVE_TIVAOUANE, Car.STATUT_ARRIVE_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_TERMINE)

    def test_incident_prioritaire(self):
        statuts = [Car.STATUT_ARRIVE_TIVAOUANE, Car.STATUT_ARRIVE_TIVAOUANE, Car.STATUT_INCIDENT]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_INCIDENT)

    def test_a_tivaouane_compte_comme_demarre(self):
        statuts = [Car.STATUT_A_TIVAOUANE, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_EN_COURS)

    def test_a_tivaouane_seul_n_est_pas_termine(self):
        self.assertEqual(
            deriver_statut_deplacement([Car.STATUT_A_TIVAOUANE]),
            Deplacement.STATUT_EN_COURS
        )

    def test_en_route_vers_mbour_compte_comme_demarre(self):
        self.assertEqual(
            deriver_statut_deplacement([Car.STATUT_EN_ROUTE_MBOUR]),
            Deplacement.STATUT_EN_COURS
        )

    def test_arrive_mbour_seul_avec_car_a_mbour(self):
        statuts = [Car.STATUT_ARRIVE_MBOUR, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_NON_COMMENCE)

    def test_trois_cars_arrives_a_tivaouane(self):
        statuts = [Car.STATUT_ARRIVE_TIVAOUANE] * 3
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_TERMINE)

    def test_cars_repartis_sur_le_trajet(self):
        statuts = [Car.STATUT_A_MBOUR, Car.STATUT_EN_ROUTE, Car.STATUT_ARRIVE_TIVAOUANE]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_EN_COURS)

    def test_arrive_tivaouane_avec_car_a_mbour(self):
        statuts = [Car.STATUT_ARRIVE_TIVAOUANE, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_EN_COURS)

    def test_incident_parmi_cars_arrives_et_au_depart(self):
        statuts = [Car.STATUT_ARRIVE_TIVAOUANE, Car.STATUT_INCIDENT, Car.STATUT_A_MBOUR]
        self.assertEqual(deriver_statut_deplacement(statuts), Deplacement.STATUT_INCIDENT)


class MiseAJourStatutDeplacementTest(DonneesConvoisMixin, TestCase):
    """Tests de la mise à jour persistée du statut des déplacements"""

    def setUp(self):
        self.creer_donnees()

    def test_creation_car_recalcule_statut(self):
        self.creer_car(statut_temps_reel=Car.STATUT_EN_ROUTE)
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)

    def test_incident_puis_resolution(self):
        car = self.creer_car()
        car.statut_temps_reel = Car.STATUT_INCIDENT
        car.save()
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_INCIDENT)

        car.statut_temps_reel = Car.STATUT_EN_ROUTE
        car.save()
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)

    def test_suppression_dernier_car(self):
        car = self.creer_car(statut_temps_reel=Car.STATUT_ARRIVE_TIVAOUANE)
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_TERMINE)

        car.delete()
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_NON_COMMENCE)

    def test_idempotence(self):
        self.creer_car(statut_temps_reel=Car.STATUT_EN_ROUTE)
        premier = mettre_a_jour_statut_deplacement(self.deplacement.id)
        second = mettre_a_jour_statut_deplacement(self.deplacement.id)
        self.assertEqual(premier, second)
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)

    def test_corrige_statut_modifie_a_la_main(self):
        self.creer_car(statut_temps_reel=Car.STATUT_EN_ROUTE)
        Deplacement.objects.filter(pk=self.deplacement.pk).update(statut=Deplacement.STATUT_TERMINE)

        self.assertEqual(mettre_a_jour_statut_deplacement(self.deplacement.id), Deplacement.STATUT_EN_COURS)
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)

    def test_deplacement_introuvable(self):
        self.assertIsNone(mettre_a_jour_statut_deplacement(999999))

    def test_seul_le_deplacement_du_car_change(self):
        autre = Deplacement.objects.create(
            section=self.section,
            edition=self.edition,
            type=Deplacement.TYPE_RETOUR,
            date_prevue=self.deplacement.date_prevue,
            nombre_cars_prevus=1,
        )
        self.creer_car(statut_temps_reel=Car.STATUT_EN_ROUTE)
        self.assertEqual(self.statut_deplacement(autre), Deplacement.STATUT_NON_COMMENCE)

    def test_sauvegarde_car_calcule_duree(self):
        depart = timezone.now() - timedelta(hours=7)
        car = self.creer_car(heure_depart_effective=depart, heure_arrivee_effective=depart + timedelta(hours=7))
        car.refresh_from_db()
        self.assertEqual(car.duree_trajet_minutes, 420)
        self.assertTrue(car.alerte_retard)

    def test_sauvegarde_partielle_inclut_champs_derives(self):
        car = self.creer_car(heure_depart_effective=timezone.now() - timedelta(hours=3))
        car.heure_arrivee_effective = timezone.now()
        car.save(update_fields=['heure_arrivee_effective'])
        car.refresh_from_db()
        self.assertEqual(car.duree_trajet_minutes, 180)

    def test_progression_arrivees(self):
        self.creer_car('C1', heure_arrivee_effective=timezone.now())
        self.creer_car('C2')
        progression = progression_arrivees(self.deplacement.id)
        self.assertEqual(progression['progression'], '1/2')
        self.assertFalse(progression['tous_arrives'])

    def test_progression_sans_car(self):
        self.assertFalse(progression_arrivees(self.deplacement.id)['tous_arrives'])


class NotificationServiceTest(DonneesConvoisMixin, TestCase):
    """Tests du service de notifications"""

    def setUp(self):
        self.creer_donnees()

    def test_diffusion_aux_super_admins(self):
        notifications = NotificationService().notifier(
            Notification.TYPE_ALERTE_SYSTEME, titre='Test', message='Message'
        )
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0].destinataire, self.super_admin)

    def test_destinataire_explicite(self):
        NotificationService().notifier(
            Notification.TYPE_ALERTE_SYSTEME, titre='Test', message='Message',
            destinataire=self.observateur
        )
        self.assertEqual(self.observateur.notifications.count(), 1)
        self.assertEqual(self.super_admin.notifications.count(), 0)

    def test_arrivee_complete(self):
        NotificationService().arrivee_complete(self.deplacement)
        notification = Notification.objects.get()
        self.assertEqual(notification.type, Notification.TYPE_ARRIVEE_COMPLETE)
        self.assertEqual(notification.deplacement, self.deplacement)

    def test_nettoyage_notifications_lues(self):
        ancienne = timezone.now() - timedelta(days=40)
        Notification.objects.create(
            type=Notification.TYPE_RETARD, titre='Ancienne lue', message='-',
            destinataire=self.super_admin, is_read=True, date_creation=ancienne
        )
        Notification.objects.create(
            type=Notification.TYPE_RETARD, titre='Ancienne non lue', message='-',
            destinataire=self.super_admin, date_creation=ancienne
        )
        Notification.objects.create(
            type=Notification.TYPE_RETARD, titre='Récente lue', message='-',
            destinataire=self.super_admin, is_read=True
        )

        self.assertEqual(nettoyer_notifications_lues(), 1)
        self.assertFalse(Notification.objects.filter(titre='Ancienne lue').exists())
        self.assertEqual(Notification.objects.count(), 2)

    def test_tache_nettoyage(self):
        self.assertEqual(nettoyer_anciennes_notifications(), "0 notifications supprimées")


class RecalculStatutsCommandeTest(DonneesConvoisMixin, TestCase):
    """Tests de la commande et de la tâche de recalcul des statuts"""

    def setUp(self):
        self.creer_donnees()
        self.creer_car(statut_temps_reel=Car.STATUT_EN_ROUTE)
        Deplacement.objects.filter(pk=self.deplacement.pk).update(statut=Deplacement.STATUT_NON_COMMENCE)

    def test_commande_tous_les_deplacements(self):
        sortie = StringIO()
        call_command('recalculer_statuts_deplacements', stdout=sortie)
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)
        self.assertIn('1 déplacement(s) recalculé(s), 1 statut(s) modifié(s)', sortie.getvalue())

    def test_commande_edition_active(self):
        call_command('recalculer_statuts_deplacements', '--active', stdout=StringIO())
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)

    def test_commande_edition_introuvable(self):
        with self.assertRaises(CommandError):
            call_command('recalculer_statuts_deplacements', '--edition', '999', stdout=StringIO())

    def test_tache_edition_active(self):
        self.assertEqual(recalculer_statuts_edition_active(), "1 déplacements recalculés")
        self.assertEqual(self.statut_deplacement(), Deplacement.STATUT_EN_COURS)
