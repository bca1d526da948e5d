from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import (
    Utilisateur, EditionMawlid, SousLocalite, Section, Deplacement, Car,
    Incident, Notification
)


class UtilisateurSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle Utilisateur"""
    role_display = serializers.CharField(source='get_role_display', read_only=True)
    password = serializers.CharField(write_only=True, required=False, validators=[validate_password])

    class Meta:
        model = Utilisateur
        fields = [
            'id', 'email', 'username', 'first_name', 'last_name', 'telephone',
            'role', 'role_display', 'is_active', 'password',
            'date_creation', 'date_modification'
        ]
        read_only_fields = ['id', 'date_creation', 'date_modification']
        extra_kwargs = {'username': {'required': False}}

    def create(self, validated_data):
        password = validated_data.pop('password', None)
        validated_data.setdefault('username', validated_data['email'])
        utilisateur = Utilisateur(**validated_data)
        if password:
            utilisateur.set_password(password)
        else:
            utilisateur.set_unusable_password()
        utilisateur.save()
        return utilisateur

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        utilisateur = super().update(instance, validated_data)
        if password:
            utilisateur.set_password(password)
            utilisateur.save()
        return utilisateur


class InscriptionSerializer(serializers.ModelSerializer):
    """Serializer pour l'inscription publique (rôle Observateur)"""
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta:
        model = Utilisateur
        fields = ['id', 'email', 'password', 'first_name', 'last_name', 'telephone']
        read_only_fields = ['id']
        extra_kwargs = {
            'first_name': {'required': True, 'allow_blank': False},
            'last_name': {'required': True, 'allow_blank': False},
        }

    def create(self, validated_data):
        password = validated_data.pop('password')
        utilisateur = Utilisateur(
            username=validated_data['email'],
            role=Utilisateur.ROLE_OBSERVATEUR,
            **validated_data
        )
        utilisateur.set_password(password)
        utilisateur.save()
        return utilisateur


class ProfilSerializer(serializers.ModelSerializer):
    """Serializer du profil de l'utilisateur connecté"""
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = Utilisateur
        fields = ['id', 'email', 'first_name', 'last_name', 'telephone', 'role', 'role_display']
        read_only_fields = ['id', 'email', 'role']


class ChangementMotDePasseSerializer(serializers.Serializer):
    """Serializer pour le changement de mot de passe"""
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_current_password(self, value):
        if not self.context['request'].user.check_password(value):
            raise serializers.ValidationError("Mot de passe actuel incorrect")
        return value


class ConnexionSerializer(TokenObtainPairSerializer):
    """Ajoute le profil de l'utilisateur à la paire de jetons JWT"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = ProfilSerializer(self.user).data
        return data


class EditionMawlidSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle EditionMawlid"""
    statut_display = serializers.CharField(source='get_statut_display', read_only=True)
    created_by_email = serializers.CharField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = EditionMawlid
        fields = [
            'id', 'annee', 'date_mawlid', 'date_debut_periode', 'date_fin_periode',
            'statut', 'statut_display', 'is_active', 'description',
            'created_by', 'created_by_email', 'date_creation', 'date_modification'
        ]
        read_only_fields = ['id', 'is_active', 'created_by', 'date_creation', 'date_modification']

    def validate(self, attrs):
        def valeur(champ):
            if champ in attrs:
                return attrs[champ]
            return getattr(self.instance, champ, None)

        debut = valeur('date_debut_periode')
        mawlid = valeur('date_mawlid')
        fin = valeur('date_fin_periode')
        if debut and mawlid and debut > mawlid:
            raise serializers.ValidationError("La date de début doit être antérieure à la date du Mawlid")
        if mawlid and fin and mawlid > fin:
            raise serializers.ValidationError("La date du Mawlid doit être antérieure à la date de fin")
        return attrs


class SousLocaliteSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle SousLocalite"""
    nombre_sections = serializers.SerializerMethodField()
    sections_actives = serializers.SerializerMethodField()

    class Meta:
        model = SousLocalite
        fields = [
            'id', 'code', 'nom', 'description', 'ordre_affichage',
            'nombre_sections', 'sections_actives', 'date_creation', 'date_modification'
        ]
        read_only_fields = ['id', 'date_creation', 'date_modification']

    def get_nombre_sections(self, obj) -> int:
        return obj.sections.count()

    def get_sections_actives(self, obj) -> int:
        return obj.sections.filter(is_active=True).count()

    def validate_code(self, value):
        if self.instance and value != self.instance.code:
            raise serializers.ValidationError("Le code d'une sous-localité ne peut pas être modifié")
        return value


class SectionSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle Section"""
    sous_localite_code = serializers.CharField(source='sous_localite.code', read_only=True)
    sous_localite_nom = serializers.CharField(source='sous_localite.nom', read_only=True)

    class Meta:
        model = Section
        fields = [
            'id', 'nom', 'sous_localite', 'sous_localite_code', 'sous_localite_nom',
            'president_nom', 'president_telephone', 'president_email',
            'ordre_affichage', 'is_active', 'date_creation', 'date_modification'
        ]
        read_only_fields = ['id', 'date_creation', 'date_modification']
        extra_kwargs = {'ordre_affichage': {'required': False}}


class CarSerializer(serializers.ModelSerializer):
    """
    Serializer pour le modèle Car. Le statut temps réel, les heures
    effectives et les champs dérivés ne changent que par les actions dédiées.
    """
    statut_temps_reel_display = serializers.CharField(source='get_statut_temps_reel_display', read_only=True)
    route_empruntee_display = serializers.CharField(source='get_route_empruntee_display', read_only=True)
    deplacement_type = serializers.CharField(source='deplacement.type', read_only=True)
    section_nom = serializers.CharField(source='deplacement.section.nom', read_only=True)
    edition_annee = serializers.IntegerField(source='deplacement.edition.annee', read_only=True)
    nombre_incidents = serializers.SerializerMethodField()

    class Meta:
        model = Car
        fields = [
            'id', 'deplacement', 'deplacement_type', 'section_nom', 'edition_annee',
            'numero_car', 'nombre_passagers', 'route_empruntee', 'route_empruntee_display',
            'responsable_car', 'contact_responsable', 'immatriculation',
            'nom_chauffeur', 'contact_chauffeur',
            'statut_temps_reel', 'statut_temps_reel_display',
            'heure_depart_effective', 'heure_arrivee_effective',
            'duree_trajet_minutes', 'alerte_retard', 'nombre_incidents',
            'date_creation', 'date_modification'
        ]
        read_only_fields = [
            'id', 'statut_temps_reel', 'heure_depart_effective', 'heure_arrivee_effective',
            'duree_trajet_minutes', 'alerte_retard', 'date_creation', 'date_modification'
        ]

    def get_nombre_incidents(self, obj) -> int:
        return obj.incidents.count()

    def validate_deplacement(self, value):
        if self.instance and value != self.instance.deplacement:
            raise serializers.ValidationError("Un car ne peut pas changer de déplacement")
        return value


class CarStatutSerializer(serializers.Serializer):
    """Serializer pour la mise à jour manuelle du statut d'un car"""
    statut_temps_reel = serializers.ChoiceField(choices=Car.STATUT_CHOICES, required=False)
    heure_depart_effective = serializers.DateTimeField(required=False)
    heure_arrivee_effective = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Aucune modification fournie")
        return attrs


class DeplacementSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle Deplacement"""
    statut_display = serializers.CharField(source='get_statut_display', read_only=True)
    section_nom = serializers.CharField(source='section.nom', read_only=True)
    sous_localite_code = serializers.CharField(source='section.sous_localite.code', read_only=True)
    edition_annee = serializers.IntegerField(source='edition.annee', read_only=True)
    nombre_cars = serializers.SerializerMethodField()

    class Meta:
        model = Deplacement
        fields = [
            'id', 'section', 'section_nom', 'sous_localite_code', 'edition', 'edition_annee',
            'type', 'date_prevue', 'heure_prevue', 'nombre_cars_prevus', 'nombre_cars',
            'nombre_passagers_total', 'statut', 'statut_display', 'commentaire',
            'date_creation', 'date_modification'
        ]
        read_only_fields = ['id', 'statut', 'date_creation', 'date_modification']
        # L'unicité (section, édition, type) est vérifiée dans validate()
        validators = []

    def get_nombre_cars(self, obj) -> int:
        return obj.cars.count()

    def validate(self, attrs):
        if self.instance:
            for champ in ('section', 'edition', 'type'):
                if champ in attrs and attrs[champ] != getattr(self.instance, champ):
                    raise serializers.ValidationError(
                        {champ: "Ce champ ne peut pas être modifié après la création"}
                    )
            return attrs

        existe = Deplacement.objects.filter(
            section=attrs['section'], edition=attrs['edition'], type=attrs['type']
        ).exists()
        if existe:
            raise serializers.ValidationError(
                f"Un déplacement {attrs['type']} existe déjà pour cette section dans cette édition"
            )
        return attrs


class DeplacementDetailSerializer(DeplacementSerializer):
    """Déplacement avec la liste de ses cars"""
    cars = CarSerializer(many=True, read_only=True)

    class Meta(DeplacementSerializer.Meta):
        fields = DeplacementSerializer.Meta.fields + ['cars']


class IncidentSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle Incident"""
    type_incident_display = serializers.CharField(source='get_type_incident_display', read_only=True)
    statut_resolution_display = serializers.CharField(source='get_statut_resolution_display', read_only=True)
    numero_car = serializers.CharField(source='car.numero_car', read_only=True)
    section_nom = serializers.CharField(source='car.deplacement.section.nom', read_only=True)
    signale_par_email = serializers.CharField(source='signale_par.email', read_only=True, default=None)

    class Meta:
        model = Incident
        fields = [
            'id', 'car', 'numero_car', 'section_nom', 'type_incident', 'type_incident_display',
            'description', 'heure_incident', 'localisation',
            'statut_resolution', 'statut_resolution_display',
            'resolution_description', 'heure_resolution',
            'signale_par', 'signale_par_email', 'date_creation', 'date_modification'
        ]
        read_only_fields = [
            'id', 'statut_resolution', 'resolution_description', 'heure_resolution',
            'signale_par', 'date_creation', 'date_modification'
        ]
        extra_kwargs = {'heure_incident': {'required': False}}

    def validate_car(self, value):
        if self.instance and value != self.instance.car:
            raise serializers.ValidationError("Un incident ne peut pas changer de car")
        return value


class IncidentResolutionSerializer(serializers.Serializer):
    """Serializer pour la résolution d'un incident"""
    resolution_description = serializers.CharField(required=False, allow_blank=True)
    nouveau_statut_car = serializers.ChoiceField(choices=Car.STATUT_CHOICES, required=False)


class NotificationSerializer(serializers.ModelSerializer):
    """Serializer pour le modèle Notification"""
    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'type_display', 'titre', 'message', 'car', 'deplacement',
            'incident', 'destinataire', 'is_read', 'date_creation'
        ]
        read_only_fields = ['id', 'is_read', 'date_creation']
        extra_kwargs = {'destinataire': {'required': False}}
