import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.models import PrincipalModel
from simplelink.dao.redis import LinkRedisDAO
from simplelink.services import LinkStore
from simplelink.lambdas.common import authenticated
from simplelink.utils import load_config, redis_config, app_prefix, guarantee_500_response
from simplelink.utils.http import no_content, link_id_parameter, service_errors_as_responses


logger = logging.getLogger(__name__)


@guarantee_500_response
@service_errors_as_responses
@authenticated
def lambda_handler(event: LambdaEvent, context: LambdaContext, principal: PrincipalModel) -> LambdaResponse:
    """Handle DELETE /api/links/{id}

    Deletes the link, releases its shortcode and drops its click statistics.
    Responds 204, or 403/404 for foreign/unknown links.
    """
    app_config = load_config('delete_link')
    link_id = link_id_parameter(event)

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    LinkStore(link_dao).delete(principal.user_id, link_id)

    logger.info('Deleted link. Responding with 204.', extra={'event': 'DELETE_SUCCESS', 'linkId': link_id})
    return no_content()
