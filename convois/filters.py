import django_filters
from .models import (
    EditionMawlid, Section, SousLocalite, Deplacement, Car, Incident, Notification
)


class EditionMawlidFilter(django_filters.FilterSet):
    """Filtres pour le modèle EditionMawlid"""
    statut = django_filters.ChoiceFilter(choices=EditionMawlid.STATUT_CHOICES)

    class Meta:
        model = EditionMawlid
        fields = ['statut', 'annee', 'is_active']


class SectionFilter(django_filters.FilterSet):
    """Filtres pour le modèle Section"""
    nom = django_filters.CharFilter(lookup_expr='icontains')
    sous_localite = django_filters.ModelChoiceFilter(queryset=SousLocalite.objects.all())
    code_sous_localite = django_filters.CharFilter(field_name='sous_localite__code', lookup_expr='iexact')

    class Meta:
        model = Section
        fields = ['nom', 'sous_localite', 'code_sous_localite', 'is_active']


class DeplacementFilter(django_filters.FilterSet):
    """Filtres pour le modèle Deplacement"""
    edition = django_filters.ModelChoiceFilter(queryset=EditionMawlid.objects.all())
    section = django_filters.ModelChoiceFilter(queryset=Section.objects.all())
    type = django_filters.ChoiceFilter(choices=Deplacement.TYPE_CHOICES)
    statut = django_filters.ChoiceFilter(choices=Deplacement.STATUT_CHOICES)
    date_debut = django_filters.DateFilter(field_name='date_prevue', lookup_expr='gte')
    date_fin = django_filters.DateFilter(field_name='date_prevue', lookup_expr='lte')

    class Meta:
        model = Deplacement
        fields = ['edition', 'section', 'type', 'statut', 'date_debut', 'date_fin']


class CarFilter(django_filters.FilterSet):
    """Filtres pour le modèle Car"""
    deplacement = django_filters.ModelChoiceFilter(queryset=Deplacement.objects.all())
    edition = django_filters.NumberFilter(field_name='deplacement__edition')
    statut_temps_reel = django_filters.ChoiceFilter(choices=Car.STATUT_CHOICES)
    alerte_retard = django_filters.BooleanFilter()
    numero_car = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Car
        fields = ['deplacement', 'edition', 'statut_temps_reel', 'alerte_retard', 'numero_car']


class IncidentFilter(django_filters.FilterSet):
    """Filtres pour le modèle Incident"""
    car = django_filters.ModelChoiceFilter(queryset=Car.objects.all())
    type_incident = django_filters.ChoiceFilter(choices=Incident.TYPE_CHOICES)
    statut_resolution = django_filters.ChoiceFilter(choices=Incident.RESOLUTION_CHOICES)
    date_debut = django_filters.DateTimeFilter(field_name='heure_incident', lookup_expr='gte')
    date_fin = django_filters.DateTimeFilter(field_name='heure_incident', lookup_expr='lte')

    class Meta:
        model = Incident
        fields = ['car', 'type_incident', 'statut_resolution', 'date_debut', 'date_fin']


class NotificationFilter(django_filters.FilterSet):
    """Filtres pour le modèle Notification"""
    type = django_filters.ChoiceFilter(choices=Notification.TYPE_CHOICES)
    is_read = django_filters.BooleanFilter()

    class Meta:
        model = Notification
        fields = ['type', 'is_read']
