import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.constants import TTL
from simplelink.dao.redis import UserRedisDAO
from simplelink.services import AuthService
from simplelink.utils import load_config, redis_config, app_prefix, auth_secret, guarantee_500_response
from simplelink.utils.http import json_response, parse_json_body, service_errors_as_responses


logger = logging.getLogger(__name__)


@guarantee_500_response
@service_errors_as_responses
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle POST /api/auth/login

    HTTP responses:
        200: {"token": "<jwt>", "user": {"id": 1, "email": "..."}}
        400: invalid JSON or missing email/password
        401: invalid credentials
        500: internal server error
    """
    app_config = load_config('login')
    body = parse_json_body(event)

    user_dao = UserRedisDAO(**redis_config(app_config), prefix=app_prefix())
    # fmt: off
    auth = AuthService(user_dao,
                       jwt_secret=auth_secret()['jwt_secret'],
                       token_ttl=app_config.get('auth', {}).get('token_ttl_seconds', TTL.ONE_DAY))
    # fmt: on
    token, user = auth.login(body.get('email'), body.get('password'))

    logger.info('User logged in. Responding with 200.', extra={'event': 'LOGIN_SUCCESS', 'userId': user.id})
    return json_response(200, {'token': token, 'user': user.to_json()})
