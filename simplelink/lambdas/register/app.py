import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.constants import TTL, Defaults
from simplelink.dao.redis import UserRedisDAO
from simplelink.services import AuthService
from simplelink.lambdas.common import optional_string
from simplelink.utils import load_config, redis_config, app_prefix, auth_secret, guarantee_500_response
from simplelink.utils.http import json_response, parse_json_body, service_errors_as_responses


logger = logging.getLogger(__name__)


@guarantee_500_response
@service_errors_as_responses
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle POST /api/auth/register

    This Lambda handler follows this procedure to register users:
    - Step 1: Parse {email, password, admin_token} from the request body
    - Step 2: Register the user (first user becomes admin, later ones need an admin's token)
    - Step 3: Respond with 201, the new user's bearer token and public profile

    HTTP responses:
        201: {"token": "<jwt>", "user": {"id": 1, "email": "..."}}
        400: invalid JSON, malformed email/password, email already registered
        403: not the first user and admin_token is not a valid admin token
        500: internal server error
    """
    app_config = load_config('register')
    secret = auth_secret()

    body = parse_json_body(event)
    admin_token = optional_string(body, 'admin_token')

    auth_config = app_config.get('auth', {})

    user_dao = UserRedisDAO(**redis_config(app_config), prefix=app_prefix())
    # fmt: off
    auth = AuthService(user_dao,
                       jwt_secret=secret['jwt_secret'],
                       admin_setup_token=secret.get('admin_setup_token'),
                       token_ttl=auth_config.get('token_ttl_seconds', TTL.ONE_DAY),
                       bcrypt_rounds=auth_config.get('bcrypt_rounds', Defaults.BCRYPT_ROUNDS))
    # fmt: on
    token, user = auth.register(body.get('email'), body.get('password'), admin_token=admin_token)

    logger.info('User registered. Responding with 201.', extra={'event': 'REGISTER_SUCCESS', 'userId': user.id})
    return json_response(201, {'token': token, 'user': user.to_json()})
