from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.constants import Defaults
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
    """Handle GET /api/links/{id}/clicks

    Responds 200 with [{"date": "YYYY-MM-DD", "clicks": N}, ...] in ascending
    date order. Figures lag behind redirects until the next aggregation run.
    """
    app_config = load_config('link_clicks')
    link_id = link_id_parameter(event)

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    click_dao = ClickRedisDAO(redis_client=link_dao.redis, prefix=app_prefix())

    LinkStore(link_dao).get(principal.user_id, link_id)
    aggregator = ClickAggregator(click_dao, timezone=app_config.get('analytics', {}).get('timezone', Defaults.TIMEZONE))
    return json_response(200, [day.to_json() for day in aggregator.clicks_by_day(link_id)])
