import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaResponse
from simplelink.constants import Defaults
from simplelink.dao.redis import LinkRedisDAO, ClickRedisDAO
from simplelink.exceptions import NotFoundError
from simplelink.services import LinkStore, RedirectDispatcher
from simplelink.utils import load_config, redis_config, app_prefix, get_short_url, guarantee_500_response
from simplelink.utils.http import redirect_307, path_parameter, query_parameter, service_error_response
from simplelink.lambdas.redirect_url.constants import SHORT_URL_NOT_FOUND, REDIRECT_SUCCESS


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle GET /{short_code}: the public redirect

    This Lambda handler follows this procedure to redirect clients:
    - Step 1: Extract the shortcode from the path and the ?source= tag
    - Step 2: Resolve the shortcode (single Redis round trip)
    - Step 3: Publish a click event to the click stream (best-effort)
    - Step 4: Redirect client to the original URL

    HTTP responses:
        307: Successful redirect
            headers:
                Location: original URL
        404: Unknown shortcode (no click event is published)
        500: Internal server error

    Example:
        >>> event = {'pathParameters': {'short_code': 'abc'}, 'queryStringParameters': {'source': 'twitter'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        307
        >>> response['headers']['Location']
        'https://example.com'
    """
    app_config = load_config('redirect_url')
    shortcode = path_parameter(event, 'short_code') or ''
    source = query_parameter(event, 'source')

    link_dao = LinkRedisDAO(**redis_config(app_config), prefix=app_prefix())
    click_dao = ClickRedisDAO(redis_client=link_dao.redis, prefix=app_prefix())
    # fmt: off
    dispatcher = RedirectDispatcher(LinkStore(link_dao),
                                    click_dao,
                                    publish_attempts=app_config.get('analytics', {}).get('publish_attempts', Defaults.CLICK_PUBLISH_ATTEMPTS))
    # fmt: on

    try:
        original_url = dispatcher.dispatch(shortcode, source=source)
    except NotFoundError as error:
        logger.info(
            'Short URL not found. Responding with 404.',
            extra={'event': SHORT_URL_NOT_FOUND, 'shortUrl': get_short_url(shortcode, event)},
        )
        return service_error_response(error)

    logger.info(
        'Redirecting client to original URL. Responding with 307.',
        extra={'event': REDIRECT_SUCCESS, 'shortcode': shortcode, 'source': source},
    )
    return redirect_307(location=original_url)
