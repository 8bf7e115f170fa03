from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.models import PrincipalModel
from simplelink.dao.redis import LinkRedisDAO, ClickRedisDAO
from simplelink.services import ClickAggregator, LinkStore
from simplelink.lambdas.common import authenticated
from simplelink.utils import load_config, redis_config, app_prefix, guarantee_500_response
from simplelink.utils.http import json_response, link_id_parameter, service_errors_as_responses


@guarantee_500_response
@service_errors_as_responses
@authenticated
def lambda_handler(event: LambdaEvent, context: LambdaContext, principal: PrincipalModel) -> LambdaResponse:
    """Handle GET /api/links/{id}/sources

    Responds 200 with [{"source": "...", "count": N}, ...] by count descending.
    """
    app_config = load_config('link_sources')
    link_id = link_id_parameter(event)

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    click_dao = ClickRedisDAO(redis_client=link_dao.redis, prefix=app_prefix())

    LinkStore(link_dao).get(principal.user_id, link_id)
    return json_response(200, [source.to_json() for source in ClickAggregator(click_dao).clicks_by_source(link_id)])
