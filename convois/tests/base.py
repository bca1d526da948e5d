from datetime import date

from convois.models import (
    Utilisateur, EditionMawlid, SousLocalite, Section, Deplacement, Car
)

MOT_DE_PASSE = 'Tivaouane!2025'


class DonneesConvoisMixin:
    """Jeu de données minimal : une édition active, une section, un déplacement aller"""

    def creer_donnees(self):
        self.super_admin = Utilisateur.objects.create_user(
            username='superadmin',
            email='superadmin@convois.sn',
            password=MOT_DE_PASSE,
            role=Utilisateur.ROLE_SUPER_ADMIN,
        )
        self.observateur = Utilisateur.objects.create_user(
            username='observateur',
            email='observateur@convois.sn',
            password=MOT_DE_PASSE,
            role=Utilisateur.ROLE_OBSERVATEUR,
        )
        self.edition = EditionMawlid.objects.create(
            annee=2025,
            date_mawlid=date(2025, 9, 4),
            date_debut_periode=date(2025, 9, 1),
            date_fin_periode=date(2025, 9, 7),
            statut=EditionMawlid.STATUT_EN_COURS,
            is_active=True,
        )
        self.sous_localite = SousLocalite.objects.create(code='A', nom='Mbour Centre', ordre_affichage=1)
        self.section = Section.objects.create(nom='Diamaguène', sous_localite=self.sous_localite)
        self.deplacement = Deplacement.objects.create(
            section=self.section,
            edition=self.edition,
            type=Deplacement.TYPE_ALLER,
            date_prevue=date(2025, 9, 3),
            nombre_cars_prevus=3,
        )

    def creer_car(self, numero='C1', deplacement=None, **champs):
        return Car.objects.create(
            deplacement=deplacement or self.deplacement,
            numero_car=numero,
            nombre_passagers=60,
            route_empruntee='route_nationale',
            responsable_car='Moussa Diop',
            contact_responsable='771234567',
            **champs
        )

    def statut_deplacement(self, deplacement=None):
        deplacement = deplacement or self.deplacement
        deplacement.refresh_from_db()
        return deplacement.statut
