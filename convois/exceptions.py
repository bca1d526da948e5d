"""
Gestionnaire d'exceptions de l'API

Les erreurs sont renvoyées sous la forme
{"success": false, "message": "...", "errors": {...}}
"""

import logging

from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def convois_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        if isinstance(exc, IntegrityError):
            logger.warning(f"⚠️ Conflit d'intégrité: {exc}")
            return Response({
                'success': False,
                'message': 'Cette ressource existe déjà',
            }, status=status.HTTP_409_CONFLICT)
        # Erreur non gérée : Django produit la réponse 500
        logger.error(f"❌ Erreur non gérée dans {context.get('view').__class__.__name__}: {exc}")
        return None

    if isinstance(exc, ValidationError):
        response.data = {
            'success': False,
            'message': 'Données invalides',
            'errors': response.data,
        }
    elif isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {
            'success': False,
            'message': str(response.data['detail']),
        }

    return response
