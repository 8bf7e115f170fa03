from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.models import PrincipalModel
from simplelink.dao.redis import LinkRedisDAO
from simplelink.services import LinkStore
from simplelink.lambdas.common import authenticated
from simplelink.utils import load_config, redis_config, app_prefix, guarantee_500_response
from simplelink.utils.http import json_response, service_errors_as_responses


@guarantee_500_response
@service_errors_as_responses
@authenticated
def lambda_handler(event: LambdaEvent, context: LambdaContext, principal: PrincipalModel) -> LambdaResponse:
    """Handle GET /api/links: the caller's links, newest first"""
    app_config = load_config('list_links')

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    links = LinkStore(link_dao).list(principal.user_id)
    return json_response(200, [link.to_json() for link in links])
