from datetime import date

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from convois.models import EditionMawlid, Section, SousLocalite, Deplacement, Incident
from .base import DonneesConvoisMixin


class EditionMawlidModelTest(DonneesConvoisMixin, TestCase):
    """Tests pour le modèle EditionMawlid"""

    def setUp(self):
        self.creer_donnees()

    def test_edition_str(self):
        self.assertEqual(str(self.edition), "Mawlid 2025")

    def test_edition_active(self):
        self.assertEqual(EditionMawlid.active(), self.edition)

    def test_une_seule_edition_active(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                EditionMawlid.objects.create(
                    annee=2026,
                    date_mawlid=date(2026, 8, 25),
                    date_debut_periode=date(2026, 8, 20),
                    date_fin_periode=date(2026, 8, 30),
                    is_active=True,
                )

    def test_plusieurs_editions_inactives(self):
        for annee in (2026, 2027):
            EditionMawlid.objects.create(
                annee=annee,
                date_mawlid=date(annee, 8, 25),
                date_debut_periode=date(annee, 8, 20),
                date_fin_periode=date(annee, 8, 30),
            )
        self.assertEqual(EditionMawlid.objects.filter(is_active=False).count(), 2)

    def test_ordre_des_dates(self):
        self.edition.date_debut_periode = date(2025, 9, 5)
        with self.assertRaises(ValidationError):
            self.edition.clean()


class SectionModelTest(DonneesConvoisMixin, TestCase):
    """Tests pour le modèle Section"""

    def setUp(self):
        self.creer_donnees()

    def test_ordre_affichage_automatique(self):
        deuxieme = Section.objects.create(nom='Grand Mbour', sous_localite=self.sous_localite)
        self.assertEqual(self.section.ordre_affichage, 1)
        self.assertEqual(deuxieme.ordre_affichage, 2)

    def test_ordre_affichage_par_sous_localite(self):
        autre = SousLocalite.objects.create(code='B', nom='Saly', ordre_affichage=2)
        section = Section.objects.create(nom='Saly Portudal', sous_localite=autre)
        self.assertEqual(section.ordre_affichage, 1)

    def test_nom_unique_par_sous_localite(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Section.objects.create(nom='Diamaguène', sous_localite=self.sous_localite)

    def test_code_sous_localite_invalide(self):
        sous_localite = SousLocalite(code='a', nom='Invalide', ordre_affichage=3)
        with self.assertRaises(ValidationError):
            sous_localite.full_clean()


class DeplacementModelTest(DonneesConvoisMixin, TestCase):
    """Tests pour le modèle Deplacement"""

    def setUp(self):
        self.creer_donnees()

    def test_statut_initial(self):
        self.assertEqual(self.deplacement.statut, Deplacement.STATUT_NON_COMMENCE)

    def test_un_seul_deplacement_par_type(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Deplacement.objects.create(
                    section=self.section,
                    edition=self.edition,
                    type=Deplacement.TYPE_ALLER,
                    date_prevue=date(2025, 9, 3),
                    nombre_cars_prevus=1,
                )

    def test_suppression_en_cascade(self):
        car = self.creer_car()
        Incident.objects.create(car=car, type_incident='panne', description='Moteur')
        self.deplacement.delete()
        self.assertFalse(Incident.objects.exists())


class CarModelTest(DonneesConvoisMixin, TestCase):
    """Tests pour le modèle Car"""

    def setUp(self):
        self.creer_donnees()

    def test_car_str(self):
        car = self.creer_car('C7')
        self.assertEqual(str(car), "Car C7 (À Mbour)")

    def test_car_non_arrive(self):
        self.assertFalse(self.creer_car().est_arrive)
