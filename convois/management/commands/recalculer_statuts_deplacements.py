"""
Commande Django pour recalculer le statut des déplacements à partir de leurs cars
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
import logging

from convois.models import Deplacement, EditionMawlid
from convois.services import mettre_a_jour_statut_deplacement

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Recalcule le statut des déplacements à partir des statuts de leurs cars'

    def add_arguments(self, parser):
        parser.add_argument(
            '--edition',
            type=int,
            help='Identifiant de l\'édition à traiter',
        )
        parser.add_argument(
            '--active',
            action='store_true',
            help='Ne traiter que l\'édition active',
        )

    def handle(self, *args, **options):
        """Point d'entrée de la commande"""
        self.stdout.write(
            self.style.SUCCESS(
                f'=== RECALCUL DES STATUTS - {timezone.now().strftime("%Y-%m-%d %H:%M:%S")} ==='
            )
        )

        deplacements = self._selectionner(options['edition'], options['active'])

        resultats = {}
        modifies = 0
        echecs = 0
        for deplacement_id, ancien_statut in deplacements.values_list('id', 'statut'):
            statut = mettre_a_jour_statut_deplacement(deplacement_id)
            if statut is None:
                echecs += 1
                continue
            resultats[statut] = resultats.get(statut, 0) + 1
            if statut != ancien_statut:
                modifies += 1

        libelles = dict(Deplacement.STATUT_CHOICES)
        for statut, nombre in sorted(resultats.items()):
            self.stdout.write(f'  {libelles[statut]}: {nombre}')

        if echecs:
            self.stdout.write(self.style.WARNING(f'⚠️ {echecs} déplacement(s) non recalculé(s)'))

        self.stdout.write(
            self.style.SUCCESS(f'✅ {sum(resultats.values())} déplacement(s) recalculé(s), {modifies} statut(s) modifié(s)')
        )

    def _selectionner(self, edition_id, active):
        if edition_id and active:
            raise CommandError('Les options --edition et --active sont incompatibles')

        deplacements = Deplacement.objects.all()
        if edition_id:
            if not EditionMawlid.objects.filter(pk=edition_id).exists():
                raise CommandError(f'Édition {edition_id} introuvable')
            deplacements = deplacements.filter(edition_id=edition_id)
        elif active:
            edition = EditionMawlid.active()
            if not edition:
                raise CommandError('Aucune édition active')
            deplacements = deplacements.filter(edition=edition)

        return deplacements
