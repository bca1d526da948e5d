"""
Vues du tableau de bord et des rapports

Toutes les statistiques portent sur une édition : celle passée en paramètre
(?edition=<id>) ou, à défaut, l'édition active.
"""

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from django.db import connection, DatabaseError
from django.db.models import Sum
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
import logging

from .models import EditionMawlid, SousLocalite, Deplacement, Car, Incident
from .permissions import IsSuperAdmin
from .serializers import EditionMawlidSerializer, DeplacementSerializer, CarSerializer
from .views import compter_par_statut, parametre_edition

logger = logging.getLogger(__name__)

PARAMETRE_EDITION = OpenApiParameter(
    name='edition',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Identifiant de l'édition (édition active par défaut)",
)

STATUTS_EN_ROUTE = (Car.STATUT_EN_ROUTE, Car.STATUT_EN_ROUTE_MBOUR)


def edition_cible(request):
    edition_id = parametre_edition(request)
    if edition_id:
        edition = EditionMawlid.objects.filter(pk=edition_id).first()
    else:
        edition = EditionMawlid.active()

    if not edition:
        raise NotFound("Aucune édition trouvée")
    return edition


def pourcentage(partie, total):
    return round(partie / total * 100) if total else 0


def formater_duree(minutes):
    heures, reste = divmod(abs(minutes), 60)
    signe = '-' if minutes < 0 else ''
    return f"{signe}{heures}h{reste}min"


def resume_car(car):
    section = car.deplacement.section
    return {
        'id': car.id,
        'numero_car': car.numero_car,
        'section': section.nom,
        'sous_localite': section.sous_localite.code,
        'type_deplacement': car.deplacement.type,
        'nombre_passagers': car.nombre_passagers,
        'responsable': car.responsable_car,
        'contact': car.contact_responsable,
        'heure_depart': car.heure_depart_effective,
        'heure_arrivee': car.heure_arrivee_effective,
        'duree_trajet': car.duree_trajet_minutes,
        'alerte_retard': car.alerte_retard,
    }


@extend_schema(
    operation_id='dashboard_stats',
    summary='Statistiques globales d\'une édition',
    tags=['Tableau de bord'],
    parameters=[PARAMETRE_EDITION],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """
    GET /api/dashboard/stats/?edition=<id>
    """
    edition = edition_cible(request)
    deplacements = Deplacement.objects.filter(edition=edition)
    cars = list(Car.objects.filter(deplacement__edition=edition))
    incidents = Incident.objects.filter(car__deplacement__edition=edition)

    total_deplacements = deplacements.count()
    deplacements_termines = deplacements.filter(statut=Deplacement.STATUT_TERMINE).count()
    cars_arrives = sum(1 for c in cars if c.heure_arrivee_effective is not None)

    def cars_prevus(type_deplacement):
        total = deplacements.filter(type=type_deplacement).aggregate(total=Sum('nombre_cars_prevus'))
        return total['total'] or 0

    stats = {
        'edition': {
            'id': edition.id,
            'annee': edition.annee,
            'date_mawlid': edition.date_mawlid,
            'statut': edition.statut,
        },
        'deplacements': {
            'total': total_deplacements,
            'aller': deplacements.filter(type=Deplacement.TYPE_ALLER).count(),
            'retour': deplacements.filter(type=Deplacement.TYPE_RETOUR).count(),
            'termines': deplacements_termines,
            'en_cours': deplacements.filter(statut=Deplacement.STATUT_EN_COURS).count(),
            'avec_incident': deplacements.filter(statut=Deplacement.STATUT_INCIDENT).count(),
            'pourcentage_termines': pourcentage(deplacements_termines, total_deplacements),
        },
        'cars': {
            'total': len(cars),
            'prevus_aller': cars_prevus(Deplacement.TYPE_ALLER),
            'prevus_retour': cars_prevus(Deplacement.TYPE_RETOUR),
            'partis': sum(1 for c in cars if c.heure_depart_effective is not None),
            'arrives': cars_arrives,
            'en_route': sum(1 for c in cars if c.statut_temps_reel in STATUTS_EN_ROUTE),
            'avec_alerte': sum(1 for c in cars if c.alerte_retard),
            'pourcentage_arrives': pourcentage(cars_arrives, len(cars)),
            'par_statut': compter_par_statut(cars),
        },
        'passagers': {
            'total': deplacements.aggregate(total=Sum('nombre_passagers_total'))['total'] or 0,
        },
        'incidents': {
            'total': incidents.count(),
            'en_cours': incidents.filter(statut_resolution=Incident.RESOLUTION_EN_COURS).count(),
            'resolus': incidents.filter(statut_resolution=Incident.RESOLUTION_RESOLU).count(),
        },
    }
    return Response(stats)


@extend_schema(
    operation_id='dashboard_stats_by_sous_localite',
    summary='Statistiques par sous-localité',
    tags=['Tableau de bord'],
    parameters=[PARAMETRE_EDITION],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats_by_sous_localite(request):
    """
    GET /api/dashboard/stats/by-sous-localite/?edition=<id>
    """
    edition = edition_cible(request)
    stats = []

    for sous_localite in SousLocalite.objects.order_by('ordre_affichage'):
        cars = list(
            Car.objects.filter(
                deplacement__edition=edition,
                deplacement__section__sous_localite=sous_localite,
            )
        )
        stats.append({
            'sous_localite': {
                'id': sous_localite.id,
                'code': sous_localite.code,
                'nom': sous_localite.nom,
            },
            'nombre_sections': sous_localite.sections.count(),
            'nombre_deplacements': Deplacement.objects.filter(
                edition=edition, section__sous_localite=sous_localite
            ).count(),
            'nombre_cars': len(cars),
            'total_passagers': sum(c.nombre_passagers for c in cars),
            'cars_avec_alerte': sum(1 for c in cars if c.alerte_retard),
            'nombre_incidents': Incident.objects.filter(car__in=cars).count(),
        })

    return Response({
        'edition': EditionMawlidSerializer(edition).data,
        'stats': stats,
    })


@extend_schema(
    operation_id='dashboard_cars_realtime',
    summary='Cars de l\'édition active en temps réel',
    tags=['Tableau de bord'],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_cars_realtime(request):
    """
    GET /api/dashboard/cars-realtime/
    """
    edition = EditionMawlid.active()
    if not edition:
        return Response(
            {'success': False, 'message': 'Aucune édition active trouvée'},
            status=status.HTTP_404_NOT_FOUND
        )

    cars = list(
        Car.objects
        .filter(deplacement__edition=edition)
        .select_related('deplacement__section__sous_localite')
        .order_by('-date_modification')
    )
    cars_avec_incident = set(
        Incident.objects
        .filter(car__in=cars, statut_resolution=Incident.RESOLUTION_EN_COURS)
        .values_list('car_id', flat=True)
    )

    cars_par_statut = {code: [] for code, _ in Car.STATUT_CHOICES}
    for car in cars:
        resume = resume_car(car)
        resume['a_incident'] = car.id in cars_avec_incident
        cars_par_statut[car.statut_temps_reel].append(resume)

    compteurs = compter_par_statut(cars)
    compteurs['total'] = len(cars)
    compteurs['avec_alerte'] = sum(1 for c in cars if c.alerte_retard)

    return Response({
        'edition': EditionMawlidSerializer(edition).data,
        'cars': cars_par_statut,
        'compteurs': compteurs,
        'derniere_mise_a_jour': timezone.now(),
    })


@extend_schema(
    operation_id='dashboard_timeline',
    summary='Chronologie des départs et arrivées',
    tags=['Tableau de bord'],
    parameters=[PARAMETRE_EDITION],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_timeline(request):
    """
    GET /api/dashboard/timeline/?edition=<id>

    Événements DEPART et ARRIVEE, du plus récent au plus ancien.
    """
    edition = edition_cible(request)
    cars = (
        Car.objects
        .filter(deplacement__edition=edition)
        .exclude(heure_depart_effective__isnull=True, heure_arrivee_effective__isnull=True)
        .select_related('deplacement__section__sous_localite')
    )

    timeline = []
    for car in cars:
        base = {
            'car_id': car.id,
            'numero_car': car.numero_car,
            'section': car.deplacement.section.nom,
            'sous_localite': car.deplacement.section.sous_localite.code,
            'type_deplacement': car.deplacement.type,
            'nombre_passagers': car.nombre_passagers,
        }
        if car.heure_depart_effective:
            timeline.append({'type': 'DEPART', 'heure': car.heure_depart_effective, **base})
        if car.heure_arrivee_effective:
            timeline.append({
                'type': 'ARRIVEE',
                'heure': car.heure_arrivee_effective,
                'duree_trajet': car.duree_trajet_minutes,
                **base
            })

    timeline.sort(key=lambda evenement: evenement['heure'], reverse=True)

    return Response({
        'edition': EditionMawlidSerializer(edition).data,
        'timeline': timeline,
        'total_evenements': len(timeline),
    })


@extend_schema(
    operation_id='rapport_edition',
    summary='Rapport complet d\'une édition',
    tags=['Rapports'],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsSuperAdmin])
def rapport_edition(request, edition_id):
    """
    GET /api/rapports/edition/<id>/
    """
    edition = get_object_or_404(EditionMawlid, pk=edition_id)
    deplacements = list(
        Deplacement.objects
        .filter(edition=edition)
        .select_related('section__sous_localite')
        .prefetch_related('cars__incidents')
        .order_by('type', 'date_prevue')
    )

    tous_les_cars = [car for d in deplacements for car in d.cars.all()]
    tous_les_incidents = [i for car in tous_les_cars for i in car.incidents.all()]
    durees = [c.duree_trajet_minutes for c in tous_les_cars if c.duree_trajet_minutes is not None]
    temps_moyen = round(sum(durees) / len(durees)) if durees else 0

    ponctualite = []
    rapport_par_section = []
    for deplacement in deplacements:
        cars = list(deplacement.cars.all())
        incidents = [i for car in cars for i in car.incidents.all()]
        arrives = [c for c in cars if c.heure_arrivee_effective is not None]
        en_retard = [c for c in cars if c.alerte_retard]

        if arrives:
            ponctualite.append({
                'section': deplacement.section.nom,
                'sous_localite': deplacement.section.sous_localite.code,
                'type': deplacement.type,
                'cars_total': len(cars),
                'cars_arrives': len(arrives),
                'cars_en_retard': len(en_retard),
                'taux_ponctualite': pourcentage(len(arrives) - len(en_retard), len(arrives)),
            })

        rapport_par_section.append({
            'section_id': deplacement.section.id,
            'section_nom': deplacement.section.nom,
            'sous_localite': deplacement.section.sous_localite.code,
            'type': deplacement.type,
            'date_prevue': deplacement.date_prevue,
            'heure_prevue': deplacement.heure_prevue,
            'statut': deplacement.statut,
            'nombre_cars_prevus': deplacement.nombre_cars_prevus,
            'nombre_cars_effectifs': len(cars),
            'nombre_passagers': sum(c.nombre_passagers for c in cars),
            'cars_partis': sum(1 for c in cars if c.heure_depart_effective is not None),
            'cars_arrives': len(arrives),
            'cars_en_retard': len(en_retard),
            'nombre_incidents': len(incidents),
            'incidents_details': [
                {
                    'type': i.type_incident,
                    'description': i.description,
                    'statut': i.statut_resolution,
                    'heure': i.heure_incident,
                }
                for i in incidents
            ],
        })

    ponctualite.sort(key=lambda ligne: ligne['taux_ponctualite'], reverse=True)

    logger.info(f"📊 Rapport de l'édition {edition.annee} généré par {request.user.email}")
    return Response({
        'edition': {
            'id': edition.id,
            'annee': edition.annee,
            'date_mawlid': edition.date_mawlid,
            'statut': edition.statut,
        },
        'statistiques_globales': {
            'nombre_deplacements': len(deplacements),
            'nombre_deplacements_aller': sum(1 for d in deplacements if d.type == Deplacement.TYPE_ALLER),
            'nombre_deplacements_retour': sum(1 for d in deplacements if d.type == Deplacement.TYPE_RETOUR),
            'nombre_cars_total': len(tous_les_cars),
            'nombre_passagers_total': sum(c.nombre_passagers for c in tous_les_cars),
            'nombre_incidents_total': len(tous_les_incidents),
            'nombre_incidents_resolus': sum(1 for i in tous_les_incidents if i.est_resolu),
            'nombre_incidents_en_cours': sum(1 for i in tous_les_incidents if not i.est_resolu),
            'temps_moyen_trajet_minutes': temps_moyen,
            'temps_moyen_trajet_heures': formater_duree(temps_moyen),
        },
        'sections_plus_ponctuelles': ponctualite[:10],
        'rapport_par_section': rapport_par_section,
        'date_generation': timezone.now(),
    })


@extend_schema(
    operation_id='rapport_deplacement',
    summary='Rapport détaillé d\'un déplacement',
    tags=['Rapports'],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([IsSuperAdmin])
def rapport_deplacement(request, deplacement_id):
    """
    GET /api/rapports/deplacement/<id>/
    """
    deplacement = get_object_or_404(
        Deplacement.objects.select_related('section__sous_localite', 'edition'),
        pk=deplacement_id
    )
    cars = list(deplacement.cars.prefetch_related('incidents').order_by('numero_car'))
    durees = [c.duree_trajet_minutes for c in cars if c.duree_trajet_minutes is not None]

    incidents = [
        {
            'numero_car': car.numero_car,
            'type': incident.type_incident,
            'description': incident.description,
            'statut': incident.statut_resolution,
            'heure': incident.heure_incident,
            'heure_resolution': incident.heure_resolution,
        }
        for car in cars
        for incident in car.incidents.all()
    ]

    logger.info(f"📊 Rapport du déplacement {deplacement.id} généré par {request.user.email}")
    return Response({
        'deplacement': DeplacementSerializer(deplacement).data,
        'statistiques': {
            'nombre_cars_prevus': deplacement.nombre_cars_prevus,
            'nombre_cars_effectifs': len(cars),
            'nombre_passagers': sum(c.nombre_passagers for c in cars),
            'cars_partis': sum(1 for c in cars if c.heure_depart_effective is not None),
            'cars_arrives': sum(1 for c in cars if c.heure_arrivee_effective is not None),
            'cars_en_retard': sum(1 for c in cars if c.alerte_retard),
            'duree_min_minutes': min(durees) if durees else None,
            'duree_max_minutes': max(durees) if durees else None,
            'duree_moyenne_minutes': round(sum(durees) / len(durees)) if durees else None,
        },
        'cars': CarSerializer(cars, many=True).data,
        'incidents': incidents,
        'date_generation': timezone.now(),
    })


@extend_schema(
    operation_id='health',
    summary='État du service',
    tags=['Santé'],
    responses={200: OpenApiTypes.OBJECT},
)
@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """
    GET /health/
    """
    try:
        connection.ensure_connection()
        base_de_donnees = 'ok'
    except DatabaseError as e:
        logger.error(f"❌ Base de données indisponible: {e}")
        base_de_donnees = 'indisponible'

    code = status.HTTP_200_OK if base_de_donnees == 'ok' else status.HTTP_503_SERVICE_UNAVAILABLE
    return Response({
        'status': 'OK' if base_de_donnees == 'ok' else 'DEGRADED',
        'database': base_de_donnees,
        'timestamp': timezone.now(),
    }, status=code)
