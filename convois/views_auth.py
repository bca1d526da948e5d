from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView
from drf_spectacular.utils import extend_schema
import logging

from .serializers import (
    InscriptionSerializer, ProfilSerializer, ChangementMotDePasseSerializer,
    ConnexionSerializer
)

logger = logging.getLogger(__name__)


class ConnexionView(TokenObtainPairView):
    """
    Connexion par email et mot de passe.

    POST /api/auth/login/
    Retourne {"access": ..., "refresh": ..., "user": {...}}
    """
    serializer_class = ConnexionSerializer


@extend_schema(
    operation_id='register',
    summary='Inscription d\'un observateur',
    description='''
    Crée un compte utilisateur. Le rôle attribué est toujours Observateur,
    quelle que soit la valeur envoyée.
    ''',
    tags=['Authentification'],
    request=InscriptionSerializer,
    responses={201: ProfilSerializer},
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    POST /api/auth/register/
    """
    serializer = InscriptionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    utilisateur = serializer.save()

    logger.info(f"👤 Nouvel utilisateur inscrit: {utilisateur.email}")
    return Response({
        'success': True,
        'message': 'Inscription réussie',
        'user': ProfilSerializer(utilisateur).data
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    operation_id='me',
    summary='Profil de l\'utilisateur connecté',
    tags=['Authentification'],
    request=ProfilSerializer,
    responses={200: ProfilSerializer},
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def me(request):
    """
    GET /api/auth/me/  : profil courant
    PUT /api/auth/me/  : mise à jour (prénom, nom, téléphone)
    """
    if request.method == 'GET':
        return Response(ProfilSerializer(request.user).data)

    serializer = ProfilSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()

    logger.info(f"Profil mis à jour: {request.user.email}")
    return Response({
        'success': True,
        'message': 'Profil mis à jour avec succès',
        'user': serializer.data
    })


@extend_schema(
    operation_id='change_password',
    summary='Changement de mot de passe',
    tags=['Authentification'],
    request=ChangementMotDePasseSerializer,
    responses={200: None},
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """
    PUT /api/auth/change-password/
    {"current_password": "...", "new_password": "..."}
    """
    serializer = ChangementMotDePasseSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)

    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save()

    logger.info(f"🔑 Mot de passe modifié pour {request.user.email}")
    return Response({'success': True, 'message': 'Mot de passe modifié avec succès'})
