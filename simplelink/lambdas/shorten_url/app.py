import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.constants import Defaults
from simplelink.models import PrincipalModel
from simplelink.dao.redis import LinkRedisDAO
from simplelink.services import CodeAllocator, LinkStore
from simplelink.lambdas.common import authenticated, optional_string
from simplelink.utils import load_config, redis_config, app_prefix, get_short_url, guarantee_500_response
from simplelink.utils.http import json_response, parse_json_body, service_errors_as_responses


logger = logging.getLogger(__name__)


@guarantee_500_response
@service_errors_as_responses
@authenticated
def lambda_handler(event: LambdaEvent, context: LambdaContext, principal: PrincipalModel) -> LambdaResponse:
    """Handle POST /api/shorten

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Authenticate the bearer token (see @authenticated)
    - Step 2: Parse {url, custom_code} from the request body
    - Step 3: Allocate the shortcode (custom or generated) and store the link
    - Step 4: Respond with 201 and the new link

    HTTP responses:
        201: Link JSON {"id", "user_id", "original_url", "short_code", "created_at", "clicks"}
        400: invalid JSON, invalid URL, malformed or reserved custom code
        401: missing/invalid bearer token
        409: custom code taken, or no free generated shortcode
        500: internal server error

    Example:
        >>> event = {'body': '{"url": "https://example.com", "custom_code": "abc"}',
        ...          'headers': {'Authorization': 'Bearer <jwt>'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['short_code']
        'abc'
    """
    app_config = load_config('shorten_url')
    shortener = app_config.get('shortener', {})

    body = parse_json_body(event)
    custom_code = optional_string(body, 'custom_code')

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    # fmt: off
    allocator = CodeAllocator(link_dao,
                              salt=shortener.get('salt', Defaults.SHORTCODE_SALT),
                              length=shortener.get('length', Defaults.SHORTCODE_LENGTH),
                              max_attempts=shortener.get('max_attempts', Defaults.ALLOCATION_ATTEMPTS))
    # fmt: on
    link = LinkStore(link_dao, allocator).create(principal.user_id, body.get('url'), code=custom_code)

    logger.info(
        'Shortened URL. Responding with 201.',
        extra={'event': 'SHORTEN_SUCCESS', 'shortUrl': get_short_url(link.short_code, event), 'linkId': link.id},
    )
    return json_response(201, link.to_json())
