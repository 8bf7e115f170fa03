import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.dao.redis import LinkRedisDAO
from simplelink.dao.exceptions import DataStoreError
from simplelink.utils import load_config, redis_config, app_prefix, guarantee_500_response
from simplelink.utils.http import json_response


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /api/health: 200 "Healthy" if Redis answers PING, else 503"""
    app_config = load_config('health_check')

    try:
        LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    except DataStoreError as error:
        logger.warning('Redis healthcheck failed. Responding with 503.', extra={'event': 'UNHEALTHY', 'reason': str(error)})
        return json_response(503, 'Unhealthy')

    return json_response(200, 'Healthy')
