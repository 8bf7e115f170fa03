import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.models import PrincipalModel
from simplelink.dao.redis import LinkRedisDAO
from simplelink.services import LinkStore
from simplelink.lambdas.common import authenticated, optional_string
from simplelink.utils import load_config, redis_config, app_prefix, guarantee_500_response
from simplelink.utils.http import json_response, parse_json_body, link_id_parameter, service_errors_as_responses


logger = logging.getLogger(__name__)


@guarantee_500_response
@service_errors_as_responses
@authenticated
def lambda_handler(event: LambdaEvent, context: LambdaContext, principal: PrincipalModel) -> LambdaResponse:
    """Handle PATCH /api/links/{id}

    Body: {"url"?: "...", "custom_code"?: "..."}, at least one of them.

    HTTP responses:
        200: the edited Link JSON
        400: invalid JSON, empty patch, invalid URL, malformed or reserved code
        401: missing/invalid bearer token
        403: the link belongs to another user
        404: unknown link id
        409: custom code taken by another link
        500: internal server error
    """
    app_config = load_config('edit_link')
    link_id = link_id_parameter(event)

    body = parse_json_body(event)
    url = optional_string(body, 'url')
    custom_code = optional_string(body, 'custom_code')

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    link = LinkStore(link_dao).update(principal.user_id, link_id, url=url, code=custom_code)

    logger.info('Edited link. Responding with 200.', extra={'event': 'EDIT_SUCCESS', 'linkId': link_id})
    return json_response(200, link.to_json())
