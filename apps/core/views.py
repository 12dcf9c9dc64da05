"""
Core Views for the Referral Backend

Contains the health check endpoint.
"""
import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from .authentication import get_user_context

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint for deployment verification.

    Returns:
        - 200: Service is healthy
        - 503: Service is unhealthy (database connection failed)

    Response includes:
        - status: 'healthy' or 'unhealthy'
        - database: 'connected' or error message
        - authenticated: True if a valid token was sent
        - user_id / role: for the authenticated principal
    """
    response_data = {
        'status': 'healthy',
        'service': 'referral-backend',
        'database': 'unknown',
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        response_data['database'] = 'connected'
    except DatabaseError as e:
        logger.error(f'Health check database failure: {e}')
        response_data['status'] = 'unhealthy'
        response_data['database'] = f'error: {e}'
        return JsonResponse(response_data, status=503)

    user = get_user_context(request)
    if user is not None:
        response_data['authenticated'] = True
        response_data['user_id'] = str(user.id)
        response_data['role'] = user.role
    else:
        response_data['authenticated'] = False

    return JsonResponse(response_data)
