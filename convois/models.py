from django.db import models
from django.db.models import Q
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.utils import timezone


class Utilisateur(AbstractUser):
    """Modèle utilisateur personnalisé, authentifié par email"""
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_ADMIN = 'admin'
    ROLE_OBSERVATEUR = 'observateur'

    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Admin'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_OBSERVATEUR, 'Observateur'),
    ]

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_OBSERVATEUR)
    telephone = models.CharField(max_length=20, blank=True)
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        verbose_name = "Utilisateur"
        verbose_name_plural = "Utilisateurs"

    def __str__(self):
        return self.email

    @property
    def est_super_admin(self):
        return self.role == self.ROLE_SUPER_ADMIN


class EditionMawlid(models.Model):
    """Une édition annuelle du Mawlid"""
    STATUT_PLANIFIEE = 'planifiee'
    STATUT_EN_COURS = 'en_cours'
    STATUT_TERMINEE = 'terminee'
    STATUT_ARCHIVEE = 'archivee'

    STATUT_CHOICES = [
        (STATUT_PLANIFIEE, 'Planifiée'),
        (STATUT_EN_COURS, 'En cours'),
        (STATUT_TERMINEE, 'Terminée'),
        (STATUT_ARCHIVEE, 'Archivée'),
    ]

    annee = models.IntegerField(
        unique=True,
        validators=[MinValueValidator(2025), MaxValueValidator(2100)]
    )
    date_mawlid = models.DateField()
    date_debut_periode = models.DateField()
    date_fin_periode = models.DateField()
    statut = models.CharField(max_length=20, choices=STATUT_CHOICES, default=STATUT_PLANIFIEE)
    is_active = models.BooleanField(default=False)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(
        Utilisateur,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='editions_creees'
    )
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Édition du Mawlid"
        verbose_name_plural = "Éditions du Mawlid"
        ordering = ['-annee']
        constraints = [
            models.UniqueConstraint(
                fields=['is_active'],
                condition=Q(is_active=True),
                name='une_seule_edition_active',
            ),
        ]

    def __str__(self):
        return f"Mawlid {self.annee}"

    def clean(self):
        if self.date_debut_periode and self.date_mawlid and self.date_debut_periode > self.date_mawlid:
            raise ValidationError("La date de début doit être antérieure à la date du Mawlid")
        if self.date_mawlid and self.date_fin_periode and self.date_mawlid > self.date_fin_periode:
            raise ValidationError("La date du Mawlid doit être antérieure à la date de fin")

    @classmethod
    def active(cls):
        return cls.objects.filter(is_active=True).first()


class SousLocalite(models.Model):
    """Regroupement géographique des sections (A, B, C...)"""
    code = models.CharField(
        max_length=1,
        unique=True,
        validators=[RegexValidator(r'^[A-Z]$', "Le code doit être une lettre majuscule unique (A-Z)")]
    )
    nom = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    ordre_affichage = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Sous-localité"
        verbose_name_plural = "Sous-localités"
        ordering = ['ordre_affichage']

    def __str__(self):
        return f"{self.code} - {self.nom}"


class Section(models.Model):
    """Section de participants rattachée à une sous-localité"""
    nom = models.CharField(max_length=100)
    sous_localite = models.ForeignKey(SousLocalite, on_delete=models.CASCADE, related_name='sections')
    president_nom = models.CharField(max_length=100, blank=True)
    president_telephone = models.CharField(max_length=20, blank=True)
    president_email = models.EmailField(max_length=150, blank=True)
    ordre_affichage = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Section"
        verbose_name_plural = "Sections"
        ordering = ['sous_localite__ordre_affichage', 'ordre_affichage']
        unique_together = ['nom', 'sous_localite']

    def __str__(self):
        return self.nom

    def save(self, *args, **kwargs):
        if not self.ordre_affichage:
            dernier = (
                Section.objects.filter(sous_localite_id=self.sous_localite_id)
                .order_by('-ordre_affichage')
                .values_list('ordre_affichage', flat=True)
                .first()
            )
            self.ordre_affichage = (dernier or 0) + 1
        super().save(*args, **kwargs)


class Deplacement(models.Model):
    """Mouvement de convoi d'une section pour une édition (aller ou retour)"""
    TYPE_ALLER = 'ALLER'
    TYPE_RETOUR = 'RETOUR'

    TYPE_CHOICES = [
        (TYPE_ALLER, 'Aller'),
        (TYPE_RETOUR, 'Retour'),
    ]

    STATUT_NON_COMMENCE = 'non_commence'
    STATUT_EN_COURS = 'en_cours'
    STATUT_TERMINE = 'termine'
    STATUT_INCIDENT = 'incident'

    STATUT_CHOICES = [
        (STATUT_NON_COMMENCE, 'Non commencé'),
        (STATUT_EN_COURS, 'En cours'),
        (STATUT_TERMINE, 'Terminé'),
        (STATUT_INCIDENT, 'Incident'),
    ]

    section = models.ForeignKey(Section, on_delete=models.CASCADE, related_name='deplacements')
    edition = models.ForeignKey(EditionMawlid, on_delete=models.CASCADE, related_name='deplacements')
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    date_prevue = models.DateField()
    heure_prevue = models.TimeField(null=True, blank=True)
    nombre_cars_prevus = models.PositiveIntegerField()
    nombre_passagers_total = models.PositiveIntegerField(default=0)
    # Projection des statuts des cars, jamais modifiée directement par l'API
    statut = models.CharField(max_length=20, choices=STATUT_CHOICES, default=STATUT_NON_COMMENCE)
    commentaire = models.TextField(blank=True)
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Déplacement"
        verbose_name_plural = "Déplacements"
        ordering = ['date_prevue', '-date_creation']
        unique_together = ['section', 'edition', 'type']
        indexes = [
            models.Index(fields=['edition', 'type'], name='depl_edition_type_idx'),
            models.Index(fields=['edition', 'statut'], name='depl_edition_statut_idx'),
        ]

    def __str__(self):
        return f"{self.section.nom} - {self.type} ({self.edition.annee})"


class Car(models.Model):
    """Bus d'un déplacement, suivi individuellement en temps réel"""
    ROUTE_CHOICES = [
        ('route_nationale', 'Route Nationale'),
        ('autoroute', 'Autoroute'),
        ('autre', 'Autre'),
    ]

    STATUT_A_MBOUR = 'a_mbour'
    STATUT_EN_ROUTE = 'en_route'
    STATUT_ARRIVE_TIVAOUANE = 'arrive_tivaouane'
    STATUT_A_TIVAOUANE = 'a_tivaouane'
    STATUT_EN_ROUTE_MBOUR = 'en_route_mbour'
    STATUT_ARRIVE_MBOUR = 'arrive_mbour'
    STATUT_INCIDENT = 'incident'

    STATUT_CHOICES = [
        (STATUT_A_MBOUR, 'À Mbour'),
        (STATUT_EN_ROUTE, 'En route'),
        (STATUT_ARRIVE_TIVAOUANE, 'Arrivé à Tivaouane'),
        (STATUT_A_TIVAOUANE, 'À Tivaouane'),
        (STATUT_EN_ROUTE_MBOUR, 'En route vers Mbour'),
        (STATUT_ARRIVE_MBOUR, 'Arrivé à Mbour'),
        (STATUT_INCIDENT, 'Incident'),
    ]

    deplacement = models.ForeignKey(Deplacement, on_delete=models.CASCADE, related_name='cars')
    numero_car = models.CharField(max_length=20)
    nombre_passagers = models.PositiveIntegerField()
    route_empruntee = models.CharField(max_length=20, choices=ROUTE_CHOICES)
    responsable_car = models.CharField(max_length=100)
    contact_responsable = models.CharField(max_length=20)
    immatriculation = models.CharField(max_length=50, blank=True)
    nom_chauffeur = models.CharField(max_length=100, blank=True)
    contact_chauffeur = models.CharField(max_length=20, blank=True)
    statut_temps_reel = models.CharField(max_length=20, choices=STATUT_CHOICES, default=STATUT_A_MBOUR)
    heure_depart_effective = models.DateTimeField(null=True, blank=True)
    heure_arrivee_effective = models.DateTimeField(null=True, blank=True)
    duree_trajet_minutes = models.IntegerField(null=True, blank=True)
    alerte_retard = models.BooleanField(default=False)
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Car"
        verbose_name_plural = "Cars"
        ordering = ['-date_creation']
        indexes = [
            models.Index(fields=['deplacement', 'statut_temps_reel'], name='car_deplacement_statut_idx'),
            models.Index(fields=['alerte_retard'], name='car_alerte_retard_idx'),
        ]

    def __str__(self):
        return f"Car {self.numero_car} ({self.get_statut_temps_reel_display()})"

    def save(self, *args, **kwargs):
        """Recalcule la durée du trajet et l'alerte de retard avant chaque écriture"""
        from .services import calculer_duree_trajet

        calculer_duree_trajet(self)
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'duree_trajet_minutes', 'alerte_retard'}
        super().save(*args, **kwargs)

    @property
    def est_arrive(self):
        return self.heure_arrivee_effective is not None


class Incident(models.Model):
    """Problème signalé sur un car (panne, accident, retard...)"""
    TYPE_CHOICES = [
        ('panne', 'Panne'),
        ('accident', 'Accident'),
        ('retard', 'Retard'),
        ('crevaison', 'Crevaison'),
        ('controle', 'Contrôle'),
        ('autre', 'Autre'),
    ]

    RESOLUTION_EN_COURS = 'en_cours'
    RESOLUTION_RESOLU = 'resolu'

    RESOLUTION_CHOICES = [
        (RESOLUTION_EN_COURS, 'En cours'),
        (RESOLUTION_RESOLU, 'Résolu'),
    ]

    car = models.ForeignKey(Car, on_delete=models.CASCADE, related_name='incidents')
    type_incident = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.TextField()
    heure_incident = models.DateTimeField(default=timezone.now)
    localisation = models.CharField(max_length=255, blank=True)
    statut_resolution = models.CharField(max_length=20, choices=RESOLUTION_CHOICES, default=RESOLUTION_EN_COURS)
    resolution_description = models.TextField(blank=True)
    heure_resolution = models.DateTimeField(null=True, blank=True)
    signale_par = models.ForeignKey(
        Utilisateur,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='incidents_signales'
    )
    date_creation = models.DateTimeField(auto_now_add=True)
    date_modification = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Incident"
        verbose_name_plural = "Incidents"
        ordering = ['-heure_incident']

    def __str__(self):
        return f"{self.get_type_incident_display()} - car {self.car.numero_car}"

    @property
    def est_resolu(self):
        return self.statut_resolution == self.RESOLUTION_RESOLU


class Notification(models.Model):
    """Notification adressée à un utilisateur"""
    TYPE_INCIDENT = 'incident'
    TYPE_RETARD = 'retard'
    TYPE_ARRIVEE_COMPLETE = 'arrivee_complete'
    TYPE_ALERTE_SYSTEME = 'alerte_systeme'

    TYPE_CHOICES = [
        (TYPE_INCIDENT, 'Incident'),
        (TYPE_RETARD, 'Retard'),
        (TYPE_ARRIVEE_COMPLETE, 'Arrivée complète'),
        (TYPE_ALERTE_SYSTEME, 'Alerte système'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    titre = models.CharField(max_length=255)
    message = models.TextField()
    car = models.ForeignKey(Car, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    deplacement = models.ForeignKey(
        Deplacement, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications'
    )
    incident = models.ForeignKey(
        Incident, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications'
    )
    destinataire = models.ForeignKey(Utilisateur, on_delete=models.CASCADE, related_name='notifications')
    is_read = models.BooleanField(default=False)
    date_creation = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ['-date_creation']
        indexes = [
            models.Index(fields=['destinataire', 'is_read'], name='notif_destinataire_lu_idx'),
        ]

    def __str__(self):
        return f"{self.titre} -> {self.destinataire}"
