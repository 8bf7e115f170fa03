from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.dao.redis import UserRedisDAO
from simplelink.services import AuthService
from simplelink.utils import load_config, redis_config, app_prefix, auth_secret, guarantee_500_response
from simplelink.utils.http import json_response, service_errors_as_responses


@guarantee_500_response
@service_errors_as_responses
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /api/auth/check-first-user

    Responds 200 with {"isFirstUser": true} while no user is registered, so the
    frontend can offer the admin bootstrap registration.
    """
    app_config = load_config('check_first_user')

    user_dao = UserRedisDAO(**redis_config(app_config), prefix=app_prefix())
    auth = AuthService(user_dao, jwt_secret=auth_secret()['jwt_secret'])
    return json_response(200, {'isFirstUser': auth.check_first_user()})
