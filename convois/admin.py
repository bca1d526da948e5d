from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import (
    Utilisateur, EditionMawlid, SousLocalite, Section, Deplacement, Car,
    Incident, Notification
)
from .services import mettre_a_jour_statut_deplacement


@admin.register(Utilisateur)
class UtilisateurAdmin(UserAdmin):
    list_display = ['email', 'username', 'first_name', 'last_name', 'role', 'is_active', 'date_creation']
    list_filter = ['role', 'is_active', 'is_staff']
    search_fields = ['email', 'username', 'first_name', 'last_name']
    ordering = ['email']

    fieldsets = UserAdmin.fieldsets + (
        ('Convois', {
            'fields': ('role', 'telephone')
        }),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Convois', {
            'fields': ('email', 'role', 'telephone')
        }),
    )


@admin.register(EditionMawlid)
class EditionMawlidAdmin(admin.ModelAdmin):
    list_display = ['annee', 'date_mawlid', 'statut', 'is_active', 'created_by', 'date_creation']
    list_filter = ['statut', 'is_active']
    search_fields = ['annee', 'description']
    ordering = ['-annee']
    readonly_fields = ['date_creation', 'date_modification']

    fieldsets = (
        ('Édition', {
            'fields': ('annee', 'statut', 'is_active', 'description')
        }),
        ('Dates', {
            'fields': ('date_mawlid', 'date_debut_periode', 'date_fin_periode')
        }),
        ('Métadonnées', {
            'fields': ('created_by', 'date_creation', 'date_modification')
        }),
    )


class SectionInline(admin.TabularInline):
    model = Section
    extra = 0
    fields = ['nom', 'president_nom', 'president_telephone', 'ordre_affichage', 'is_active']


@admin.register(SousLocalite)
class SousLocaliteAdmin(admin.ModelAdmin):
    list_display = ['code', 'nom', 'ordre_affichage', 'date_creation']
    search_fields = ['code', 'nom']
    ordering = ['ordre_affichage']
    inlines = [SectionInline]


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ['nom', 'sous_localite', 'president_nom', 'ordre_affichage', 'is_active']
    list_filter = ['sous_localite', 'is_active']
    search_fields = ['nom', 'president_nom']
    ordering = ['sous_localite__ordre_affichage', 'ordre_affichage']


class CarInline(admin.TabularInline):
    model = Car
    extra = 0
    fields = ['numero_car', 'nombre_passagers', 'statut_temps_reel', 'heure_depart_effective',
              'heure_arrivee_effective', 'alerte_retard']
    readonly_fields = ['alerte_retard']


@admin.register(Deplacement)
class DeplacementAdmin(admin.ModelAdmin):
    list_display = ['section', 'edition', 'type', 'date_prevue', 'nombre_cars_prevus', 'statut']
    list_filter = ['edition', 'type', 'statut']
    search_fields = ['section__nom', 'commentaire']
    ordering = ['date_prevue']
    readonly_fields = ['statut', 'date_creation', 'date_modification']
    inlines = [CarInline]

    actions = ['recalculer_statut']

    def recalculer_statut(self, request, queryset):
        for deplacement in queryset:
            mettre_a_jour_statut_deplacement(deplacement.id)
        self.message_user(request, f"{queryset.count()} déplacements recalculés.")
    recalculer_statut.short_description = "Recalculer le statut"


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = ['numero_car', 'deplacement', 'nombre_passagers', 'statut_temps_reel',
                    'duree_trajet_minutes', 'alerte_retard']
    list_filter = ['statut_temps_reel', 'alerte_retard', 'route_empruntee', 'deplacement__edition']
    search_fields = ['numero_car', 'immatriculation', 'responsable_car', 'nom_chauffeur']
    ordering = ['-date_creation']
    readonly_fields = ['duree_trajet_minutes', 'alerte_retard', 'date_creation', 'date_modification']

    fieldsets = (
        ('Car', {
            'fields': ('deplacement', 'numero_car', 'immatriculation', 'nombre_passagers', 'route_empruntee')
        }),
        ('Responsables', {
            'fields': ('responsable_car', 'contact_responsable', 'nom_chauffeur', 'contact_chauffeur')
        }),
        ('Suivi', {
            'fields': ('statut_temps_reel', 'heure_depart_effective', 'heure_arrivee_effective',
                       'duree_trajet_minutes', 'alerte_retard')
        }),
        ('Métadonnées', {
            'fields': ('date_creation', 'date_modification')
        }),
    )


@admin.register(Incident)
class IncidentAdmin(admin.ModelAdmin):
    list_display = ['car', 'type_incident', 'heure_incident', 'statut_resolution', 'signale_par']
    list_filter = ['type_incident', 'statut_resolution', 'heure_incident']
    search_fields = ['car__numero_car', 'description', 'localisation']
    ordering = ['-heure_incident']
    readonly_fields = ['date_creation', 'date_modification']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['titre', 'type', 'destinataire', 'is_read', 'date_creation']
    list_filter = ['type', 'is_read', 'date_creation']
    search_fields = ['titre', 'message', 'destinataire__email']
    ordering = ['-date_creation']

    actions = ['marquer_comme_lues']

    def marquer_comme_lues(self, request, queryset):
        queryset.update(is_read=True)
        self.message_user(request, f"{queryset.count()} notifications marquées comme lues.")
    marquer_comme_lues.short_description = "Marquer comme lues"
