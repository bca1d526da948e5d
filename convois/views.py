from rest_framework import viewsets, filters, status, serializers
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from django.db import transaction
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
import logging

from .models import (
    Utilisateur, EditionMawlid, SousLocalite, Section, Deplacement, Car,
    Incident, Notification
)
from .serializers import (
    UtilisateurSerializer, EditionMawlidSerializer, SousLocaliteSerializer,
    SectionSerializer, DeplacementSerializer, DeplacementDetailSerializer,
    CarSerializer, CarStatutSerializer, IncidentSerializer,
    IncidentResolutionSerializer, NotificationSerializer
)
from .filters import (
    EditionMawlidFilter, SectionFilter, DeplacementFilter, CarFilter,
    IncidentFilter, NotificationFilter
)
from .permissions import IsSuperAdmin, IsSuperAdminOrReadOnly, IsDestinataire
from .notifications import NotificationService, nettoyer_notifications_lues
from .services import progression_arrivees

logger = logging.getLogger(__name__)


def edition_active_ou_404():
    edition = EditionMawlid.active()
    if not edition:
        raise NotFound("Aucune édition active trouvée")
    return edition


def parametre_edition(request):
    """Identifiant passé en ?edition=, None s'il est absent"""
    valeur = request.query_params.get('edition')
    if not valeur:
        return None
    try:
        return serializers.IntegerField(min_value=1).run_validation(valeur)
    except serializers.ValidationError as exc:
        raise serializers.ValidationError({'edition': exc.detail})


def compter_par_statut(cars):
    """Compte les cars pour chacun des statuts temps réel"""
    compteurs = {code: 0 for code, _ in Car.STATUT_CHOICES}
    for car in cars:
        compteurs[car.statut_temps_reel] += 1
    return compteurs


class UtilisateurViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des utilisateurs"""
    queryset = Utilisateur.objects.all()
    serializer_class = UtilisateurSerializer
    permission_classes = [IsSuperAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['role', 'is_active']
    search_fields = ['email', 'first_name', 'last_name', 'telephone']
    ordering_fields = ['email', 'date_creation']
    ordering = ['email']


class EditionMawlidViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des éditions du Mawlid"""
    queryset = EditionMawlid.objects.select_related('created_by')
    serializer_class = EditionMawlidSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = EditionMawlidFilter
    search_fields = ['description']
    ordering_fields = ['annee', 'date_mawlid']
    ordering = ['-annee']

    def perform_create(self, serializer):
        edition = serializer.save(created_by=self.request.user, statut=EditionMawlid.STATUT_PLANIFIEE)
        logger.info(f"Nouvelle édition créée: {edition.annee} par {self.request.user.email}")

    def perform_update(self, serializer):
        if serializer.instance.statut == EditionMawlid.STATUT_ARCHIVEE:
            raise PermissionDenied("Impossible de modifier une édition archivée")
        edition = serializer.save()
        logger.info(f"Édition {edition.annee} mise à jour par {self.request.user.email}")

    def destroy(self, request, *args, **kwargs):
        edition = self.get_object()
        if edition.deplacements.exists():
            return Response({
                'success': False,
                'message': 'Impossible de supprimer une édition contenant des déplacements'
            }, status=status.HTTP_400_BAD_REQUEST)

        annee = edition.annee
        edition.delete()
        logger.info(f"Édition {annee} supprimée par {request.user.email}")
        return Response({'success': True, 'message': 'Édition supprimée avec succès'})

    @action(detail=False, methods=['get'])
    def active(self, request):
        """Récupère l'édition active"""
        serializer = self.get_serializer(edition_active_ou_404())
        return Response(serializer.data)

    @action(detail=True, methods=['put'])
    def activate(self, request, pk=None):
        """Active une édition et désactive toutes les autres"""
        edition = self.get_object()

        with transaction.atomic():
            EditionMawlid.objects.filter(is_active=True).exclude(pk=edition.pk).update(is_active=False)
            edition.is_active = True
            edition.statut = EditionMawlid.STATUT_EN_COURS
            edition.save()

        logger.info(f"Édition {edition.annee} activée par {request.user.email}")
        return Response({
            'success': True,
            'message': f'Édition {edition.annee} activée avec succès',
            'edition': self.get_serializer(edition).data
        })

    @action(detail=True, methods=['put'])
    def close(self, request, pk=None):
        """Clôture une édition"""
        edition = self.get_object()
        edition.statut = EditionMawlid.STATUT_TERMINEE
        edition.is_active = False
        edition.save()

        logger.info(f"Édition {edition.annee} clôturée par {request.user.email}")
        return Response({
            'success': True,
            'message': 'Édition clôturée avec succès',
            'edition': self.get_serializer(edition).data
        })

    @action(detail=True, methods=['put'])
    def archive(self, request, pk=None):
        """Archive une édition"""
        edition = self.get_object()
        edition.statut = EditionMawlid.STATUT_ARCHIVEE
        edition.is_active = False
        edition.save()

        logger.info(f"Édition {edition.annee} archivée par {request.user.email}")
        return Response({
            'success': True,
            'message': 'Édition archivée avec succès',
            'edition': self.get_serializer(edition).data
        })


class SousLocaliteViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des sous-localités"""
    queryset = SousLocalite.objects.all()
    serializer_class = SousLocaliteSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['code', 'nom']
    ordering_fields = ['ordre_affichage', 'code']
    ordering = ['ordre_affichage']

    def perform_create(self, serializer):
        sous_localite = serializer.save()
        logger.info(
            f"Nouvelle sous-localité créée: {sous_localite.nom} ({sous_localite.code}) par {self.request.user.email}"
        )

    def perform_update(self, serializer):
        sous_localite = serializer.save()
        logger.info(f"Sous-localité {sous_localite.nom} mise à jour par {self.request.user.email}")

    def destroy(self, request, *args, **kwargs):
        sous_localite = self.get_object()
        if sous_localite.sections.exists():
            return Response({
                'success': False,
                'message': 'Impossible de supprimer cette sous-localité car elle contient des sections'
            }, status=status.HTTP_409_CONFLICT)

        nom = sous_localite.nom
        sous_localite.delete()
        logger.info(f"Sous-localité {nom} supprimée par {request.user.email}")
        return Response({'success': True, 'message': 'Sous-localité supprimée avec succès'})

    @action(detail=True, methods=['get'])
    def sections(self, request, pk=None):
        """Récupère les sections d'une sous-localité"""
        sous_localite = self.get_object()
        sections = sous_localite.sections.order_by('ordre_affichage')
        return Response(SectionSerializer(sections, many=True).data)

    @action(detail=True, methods=['get'])
    def stats(self, request, pk=None):
        """Statistiques d'une sous-localité (sections, déplacements, cars, passagers)"""
        sous_localite = self.get_object()
        cars = Car.objects.filter(deplacement__section__sous_localite=sous_localite)

        data = {
            'sous_localite_id': sous_localite.id,
            'code': sous_localite.code,
            'nom': sous_localite.nom,
            'nombre_sections': sous_localite.sections.count(),
            'sections_actives': sous_localite.sections.filter(is_active=True).count(),
            'nombre_deplacements': Deplacement.objects.filter(section__sous_localite=sous_localite).count(),
            'nombre_cars': cars.count(),
            'total_passagers': sum(cars.values_list('nombre_passagers', flat=True)),
            'nombre_incidents': Incident.objects.filter(car__in=cars).count(),
        }
        return Response(data)


class SectionViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des sections"""
    queryset = Section.objects.select_related('sous_localite')
    serializer_class = SectionSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = SectionFilter
    search_fields = ['nom', 'president_nom']
    ordering_fields = ['ordre_affichage', 'nom']
    ordering = ['sous_localite__ordre_affichage', 'ordre_affichage']

    def perform_create(self, serializer):
        section = serializer.save()
        logger.info(f"Nouvelle section créée: {section.nom} par {self.request.user.email}")

    def perform_update(self, serializer):
        section = serializer.save()
        logger.info(f"Section {section.nom} mise à jour par {self.request.user.email}")

    def perform_destroy(self, instance):
        nom = instance.nom
        instance.delete()
        logger.info(f"Section {nom} supprimée par {self.request.user.email}")

    @action(detail=False, methods=['get'], url_path=r'by-sous-localite/(?P<code>[A-Za-z])')
    def by_sous_localite(self, request, code=None):
        """Récupère les sections d'une sous-localité par son code"""
        sous_localite = get_object_or_404(SousLocalite, code=code.upper())
        sections = self.get_queryset().filter(sous_localite=sous_localite).order_by('ordre_affichage')
        return Response({
            'sous_localite': SousLocaliteSerializer(sous_localite).data,
            'sections': self.get_serializer(sections, many=True).data
        })

    @action(detail=True, methods=['patch'])
    def toggle(self, request, pk=None):
        """Active ou désactive une section"""
        section = self.get_object()
        section.is_active = not section.is_active
        section.save()

        etat = 'activée' if section.is_active else 'désactivée'
        logger.info(f"Section {section.nom} {etat} par {request.user.email}")
        return Response({
            'success': True,
            'message': f'Section {etat} avec succès',
            'section': self.get_serializer(section).data
        })

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Statistiques globales des sections"""
        sections = Section.objects.all()
        par_sous_localite = (
            SousLocalite.objects
            .annotate(total=Count('sections'))
            .order_by('ordre_affichage')
            .values('id', 'code', 'nom', 'total')
        )
        return Response({
            'total': sections.count(),
            'actives': sections.filter(is_active=True).count(),
            'inactives': sections.filter(is_active=False).count(),
            'avec_president': sections.exclude(president_nom='').count(),
            'par_sous_localite': list(par_sous_localite),
        })


class DeplacementViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des déplacements"""
    queryset = Deplacement.objects.select_related('section__sous_localite', 'edition')
    serializer_class = DeplacementSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = DeplacementFilter
    search_fields = ['section__nom', 'commentaire']
    ordering_fields = ['date_prevue', 'type', 'statut']
    ordering = ['date_prevue', '-date_creation']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return DeplacementDetailSerializer
        return DeplacementSerializer

    def perform_create(self, serializer):
        deplacement = serializer.save(statut=Deplacement.STATUT_NON_COMMENCE)
        logger.info(
            f"Nouveau déplacement créé: Section {deplacement.section.nom} - {deplacement.type} "
            f"par {self.request.user.email}"
        )

    def perform_update(self, serializer):
        deplacement = serializer.save()
        logger.info(f"Déplacement {deplacement.id} mis à jour par {self.request.user.email}")

    def destroy(self, request, *args, **kwargs):
        deplacement = self.get_object()
        if deplacement.cars.exists():
            return Response({
                'success': False,
                'message': 'Impossible de supprimer un déplacement contenant des cars'
            }, status=status.HTTP_400_BAD_REQUEST)

        deplacement_id = deplacement.id
        deplacement.delete()
        logger.info(f"Déplacement {deplacement_id} supprimé par {request.user.email}")
        return Response({'success': True, 'message': 'Déplacement supprimé avec succès'})

    @action(detail=False, methods=['get'], url_path='active-edition')
    def active_edition(self, request):
        """Récupère les déplacements de l'édition active"""
        edition = edition_active_ou_404()
        deplacements = self.filter_queryset(self.get_queryset()).filter(edition=edition)
        return Response({
            'edition': EditionMawlidSerializer(edition).data,
            'count': deplacements.count(),
            'deplacements': self.get_serializer(deplacements, many=True).data
        })

    @action(detail=False, methods=['get'], url_path=r'edition/(?P<edition_id>\d+)')
    def par_edition(self, request, edition_id=None):
        """Récupère les déplacements d'une édition donnée"""
        edition = get_object_or_404(EditionMawlid, pk=edition_id)
        deplacements = (
            self.filter_queryset(self.get_queryset())
            .filter(edition=edition)
            .order_by('date_prevue', 'type')
        )
        return Response({
            'edition': EditionMawlidSerializer(edition).data,
            'count': deplacements.count(),
            'deplacements': self.get_serializer(deplacements, many=True).data
        })

    @action(detail=True, methods=['get'])
    def stats(self, request, pk=None):
        """Statistiques des cars d'un déplacement"""
        deplacement = self.get_object()
        cars = list(deplacement.cars.all())

        data = {
            'deplacement': DeplacementSerializer(deplacement).data,
            'stats': {
                'nombre_cars_prevus': deplacement.nombre_cars_prevus,
                'nombre_cars_enregistres': len(cars),
                'nombre_passagers_total': deplacement.nombre_passagers_total,
                'cars_partis': sum(1 for c in cars if c.heure_depart_effective is not None),
                'cars_arrives': sum(1 for c in cars if c.heure_arrivee_effective is not None),
                'cars_en_route': sum(
                    1 for c in cars
                    if c.statut_temps_reel in (Car.STATUT_EN_ROUTE, Car.STATUT_EN_ROUTE_MBOUR)
                ),
                'cars_avec_incident': sum(1 for c in cars if c.statut_temps_reel == Car.STATUT_INCIDENT),
                'cars_avec_alerte': sum(1 for c in cars if c.alerte_retard),
            }
        }
        return Response(data)


class CarViewSet(viewsets.ModelViewSet):
    """
    ViewSet pour la gestion des cars. Chaque écriture d'un car recalcule
    le statut de son déplacement (voir signals.py).
    """
    queryset = Car.objects.select_related('deplacement__section__sous_localite', 'deplacement__edition')
    serializer_class = CarSerializer
    permission_classes = [IsSuperAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = CarFilter
    search_fields = ['numero_car', 'immatriculation', 'responsable_car', 'nom_chauffeur']
    ordering_fields = ['date_creation', 'date_modification', 'numero_car', 'duree_trajet_minutes']
    ordering = ['-date_creation']

    def perform_create(self, serializer):
        car = serializer.save(statut_temps_reel=Car.STATUT_A_MBOUR)
        logger.info(
            f"Nouveau car créé: {car.numero_car} pour déplacement {car.deplacement_id} par {self.request.user.email}"
        )

    def perform_update(self, serializer):
        car = serializer.save()
        logger.info(f"Car {car.id} mis à jour par {self.request.user.email}")

    def destroy(self, request, *args, **kwargs):
        car = self.get_object()
        car_id = car.id
        car.delete()
        logger.info(f"Car {car_id} supprimé par {request.user.email}")
        return Response({'success': True, 'message': 'Car supprimé avec succès'})

    def _enregistrer(self, car, alerte_avant):
        car.save()
        if car.alerte_retard and not alerte_avant:
            NotificationService().retard_detecte(car)
        car.refresh_from_db()
        return car

    @action(detail=False, methods=['get'], url_path='temps-reel')
    def temps_reel(self, request):
        """Cars de l'édition active regroupés par statut temps réel"""
        edition = edition_active_ou_404()
        cars = list(
            self.get_queryset()
            .filter(deplacement__edition=edition)
            .order_by('-date_modification')
        )

        cars_par_statut = {code: [] for code, _ in Car.STATUT_CHOICES}
        for car in cars:
            cars_par_statut[car.statut_temps_reel].append(CarSerializer(car).data)

        return Response({
            'edition': EditionMawlidSerializer(edition).data,
            'cars_par_statut': cars_par_statut,
            'stats': {
                'total': len(cars),
                'avec_alerte': sum(1 for c in cars if c.alerte_retard),
                'par_statut': compter_par_statut(cars),
            }
        })

    @action(detail=True, methods=['put'])
    def status(self, request, pk=None):
        """Met à jour le statut temps réel et/ou les heures effectives d'un car"""
        car = self.get_object()
        serializer = CarStatutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        alerte_avant = car.alerte_retard
        for champ, valeur in serializer.validated_data.items():
            setattr(car, champ, valeur)
        car = self._enregistrer(car, alerte_avant)

        logger.info(f"Statut du car {car.id} mis à jour: {car.get_statut_temps_reel_display()} par {request.user.email}")
        return Response({
            'success': True,
            'message': 'Statut du car mis à jour avec succès',
            'car': self.get_serializer(car).data
        })

    @action(detail=True, methods=['put'])
    def depart(self, request, pk=None):
        """Enregistre le départ d'un car"""
        car = self.get_object()
        alerte_avant = car.alerte_retard
        car.heure_depart_effective = timezone.now()
        car.statut_temps_reel = Car.STATUT_EN_ROUTE
        car = self._enregistrer(car, alerte_avant)

        logger.info(f"Départ enregistré pour le car {car.id} par {request.user.email}")
        return Response({
            'success': True,
            'message': 'Départ enregistré avec succès',
            'car': self.get_serializer(car).data
        })

    @action(detail=True, methods=['put'])
    def arrivee(self, request, pk=None):
        """Enregistre l'arrivée d'un car, à Tivaouane pour un aller, à Mbour pour un retour"""
        car = self.get_object()
        alerte_avant = car.alerte_retard
        deja_arrive = car.heure_arrivee_effective is not None
        car.heure_arrivee_effective = timezone.now()
        if car.deplacement.type == Deplacement.TYPE_ALLER:
            car.statut_temps_reel = Car.STATUT_ARRIVE_TIVAOUANE
        else:
            car.statut_temps_reel = Car.STATUT_ARRIVE_MBOUR
        car = self._enregistrer(car, alerte_avant)

        logger.info(f"Arrivée enregistrée pour le car {car.id} par {request.user.email}")

        progression = progression_arrivees(car.deplacement_id)
        if progression['tous_arrives'] and not deja_arrive:
            NotificationService().arrivee_complete(car.deplacement)

        return Response({
            'success': True,
            'message': 'Arrivée enregistrée avec succès',
            'car': self.get_serializer(car).data,
            'tous_arrives': progression['tous_arrives'],
            'progression': progression['progression'],
        })


class IncidentViewSet(viewsets.ModelViewSet):
    """ViewSet pour la gestion des incidents"""
    queryset = Incident.objects.select_related('car__deplacement__section', 'signale_par')
    serializer_class = IncidentSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = IncidentFilter
    search_fields = ['description', 'localisation', 'car__numero_car']
    ordering_fields = ['heure_incident', 'type_incident']
    ordering = ['-heure_incident']

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsSuperAdmin()]
        return super().get_permissions()

    def perform_create(self, serializer):
        """Signale un incident : le car passe au statut Incident"""
        with transaction.atomic():
            incident = serializer.save(
                signale_par=self.request.user,
                statut_resolution=Incident.RESOLUTION_EN_COURS,
            )
            car = incident.car
            car.statut_temps_reel = Car.STATUT_INCIDENT
            car.save()

        logger.info(
            f"Incident signalé: {incident.get_type_incident_display()} sur car {car.id} "
            f"par {self.request.user.email}"
        )
        NotificationService().incident_signale(incident)

    def perform_update(self, serializer):
        incident = serializer.save()
        logger.info(f"Incident {incident.id} mis à jour par {self.request.user.email}")

    def perform_destroy(self, instance):
        incident_id = instance.id
        instance.delete()
        logger.info(f"Incident {incident_id} supprimé par {self.request.user.email}")

    @action(detail=False, methods=['get'], url_path='non-resolus')
    def non_resolus(self, request):
        """Récupère les incidents en cours"""
        incidents = self.get_queryset().filter(statut_resolution=Incident.RESOLUTION_EN_COURS)
        serializer = self.get_serializer(incidents, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['put'])
    def resolve(self, request, pk=None):
        """Marque un incident comme résolu, et change éventuellement le statut du car"""
        incident = self.get_object()
        serializer = IncidentResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            incident.statut_resolution = Incident.RESOLUTION_RESOLU
            incident.heure_resolution = timezone.now()
            incident.resolution_description = (
                serializer.validated_data.get('resolution_description') or 'Incident résolu'
            )
            incident.save()

            nouveau_statut = serializer.validated_data.get('nouveau_statut_car')
            if nouveau_statut:
                incident.car.statut_temps_reel = nouveau_statut
                incident.car.save()

        logger.info(f"Incident {incident.id} résolu par {request.user.email}")
        return Response({
            'success': True,
            'message': 'Incident résolu avec succès',
            'incident': self.get_serializer(incident).data
        })

    @action(detail=False, methods=['get'])
    def stats(self, request):
        """Statistiques des incidents, éventuellement pour une édition"""
        incidents = Incident.objects.all()
        edition_id = parametre_edition(request)
        if edition_id:
            incidents = incidents.filter(car__deplacement__edition_id=edition_id)

        par_type = dict(incidents.order_by().values_list('type_incident').annotate(total=Count('id')))
        return Response({
            'total': incidents.count(),
            'en_cours': incidents.filter(statut_resolution=Incident.RESOLUTION_EN_COURS).count(),
            'resolus': incidents.filter(statut_resolution=Incident.RESOLUTION_RESOLU).count(),
            'par_type': {code: par_type.get(code, 0) for code, _ in Incident.TYPE_CHOICES},
        })


class NotificationViewSet(viewsets.ModelViewSet):
    """ViewSet des notifications de l'utilisateur connecté"""
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated, IsDestinataire]
    filter_backends = [DjangoFilterBackend]
    filterset_class = NotificationFilter
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_queryset(self):
        return Notification.objects.filter(destinataire=self.request.user).select_related(
            'car', 'deplacement', 'incident'
        )

    def get_permissions(self):
        if self.action in ('create', 'clean_old'):
            return [IsSuperAdmin()]
        return super().get_permissions()

    def list(self, request, *args, **kwargs):
        """Les 50 dernières notifications"""
        notifications = self.filter_queryset(self.get_queryset())[:50]
        serializer = self.get_serializer(notifications, many=True)
        return Response(serializer.data)

    def update(self, request, *args, **kwargs):
        return Response({
            'success': False,
            'message': 'Une notification ne peut pas être modifiée'
        }, status=status.HTTP_405_METHOD_NOT_ALLOWED)

    def create(self, request, *args, **kwargs):
        """Crée une notification, pour tous les Super Admins sans destinataire explicite"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donnees = serializer.validated_data

        notifications = NotificationService().notifier(
            donnees['type'],
            titre=donnees['titre'],
            message=donnees['message'],
            car=donnees.get('car'),
            deplacement=donnees.get('deplacement'),
            incident=donnees.get('incident'),
            destinataire=donnees.get('destinataire'),
        )
        return Response({
            'success': True,
            'message': f'{len(notifications)} notification(s) créée(s) avec succès',
            'notifications': NotificationSerializer(notifications, many=True).data
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def unread(self, request):
        """Notifications non lues"""
        notifications = self.get_queryset().filter(is_read=False)
        return Response(self.get_serializer(notifications, many=True).data)

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        """Nombre de notifications non lues"""
        return Response({'count': self.get_queryset().filter(is_read=False).count()})

    @action(detail=True, methods=['put'])
    def read(self, request, pk=None):
        """Marque une notification comme lue"""
        notification = self.get_object()
        notification.is_read = True
        notification.save(update_fields=['is_read'])
        return Response({
            'success': True,
            'message': 'Notification marquée comme lue',
            'notification': self.get_serializer(notification).data
        })

    @action(detail=False, methods=['put'], url_path='mark-all-read')
    def mark_all_read(self, request):
        """Marque toutes les notifications comme lues"""
        nombre = self.get_queryset().filter(is_read=False).update(is_read=True)
        logger.info(f"{nombre} notifications marquées comme lues pour {request.user.email}")
        return Response({
            'success': True,
            'message': f'{nombre} notification(s) marquée(s) comme lue(s)',
            'count': nombre
        })

    @action(detail=False, methods=['delete'], url_path='clean-old')
    def clean_old(self, request):
        """Supprime les notifications lues de plus de 30 jours"""
        nombre = nettoyer_notifications_lues()
        logger.info(f"{nombre} anciennes notifications supprimées par {request.user.email}")
        return Response({
            'success': True,
            'message': f'{nombre} notification(s) supprimée(s)',
            'count': nombre
        })
