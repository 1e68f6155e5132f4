"""
API views (non-viewset endpoints).
"""
import logging

from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django.db import connection

logger = logging.getLogger(__name__)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.

    Returns:
        200 OK if the database, Redis and the broker all answer
        503 Service Unavailable otherwise
    """
    from infrastructure.bootstrap import get_container
    from infrastructure.cache import KeyValueStore
    from infrastructure.job_queue import JobQueue

    health = {
        'status': 'healthy',
        'checks': {}
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        health['checks']['database'] = 'ok'
    except Exception as e:
        logger.warning(f"Health check: database failed: {e}")
        health['checks']['database'] = 'unavailable'

    container = get_container()

    try:
        ok = container.get(KeyValueStore).ping()
        health['checks']['cache'] = 'ok' if ok else 'unavailable'
    except Exception as e:
        logger.warning(f"Health check: cache failed: {e}")
        health['checks']['cache'] = 'unavailable'

    try:
        ok = container.get(JobQueue).is_healthy()
        health['checks']['queue'] = 'ok' if ok else 'unavailable'
    except Exception as e:
        logger.warning(f"Health check: queue failed: {e}")
        health['checks']['queue'] = 'unavailable'

    if any(value != 'ok' for value in health['checks'].values()):
        health['status'] = 'unhealthy'

    status_code = 200 if health['status'] == 'healthy' else 503
    return Response(health, status=status_code)
