import json
import logging

from simplelink.types import LambdaEvent, LambdaContext, LambdaDiagnosticResponse
from simplelink.constants import Defaults
from simplelink.dao.redis import ClickRedisDAO
from simplelink.dao.exceptions import DataStoreError
from simplelink.services import ClickAggregator
from simplelink.utils import load_config, redis_config, app_prefix
from simplelink.lambdas.aggregate_clicks.constants import SUCCESS, ERROR


logger = logging.getLogger(__name__)


def response_success(*, stats: dict[str, int]) -> LambdaDiagnosticResponse:
    return json.dumps(
        {
            'status': SUCCESS,
            **stats,
            'message': f'Aggregated {stats["recorded"]} click events',
        }
    )


def response_error(*, error: Exception) -> LambdaDiagnosticResponse:
    return json.dumps(
        {
            'status': ERROR,
            'message': 'Failed to aggregate click events',
            'reason': str(error),
            'error': error.__class__.__name__,
        }
    )


def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaDiagnosticResponse:
    """Fold new click events into per-day and per-source statistics

    Triggered by an EventBridge schedule (every minute). Unacknowledged events
    of a previous failed run are picked up first.

    Diagnostic responses:
        success:
            status: success
            recorded: <events recorded>
            dropped: <events of deleted links>
            malformed: <unparsable events>
            message: Aggregated <recorded> click events
        error:
            status: error
            message: Failed to aggregate click events
            reason: <reason>
            error: <error class name> (e.g. DataStoreError)

    Args:
        event (dict):
            EventBridge event payload.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Example:
        >>> json.loads(lambda_handler({}, None))['status']
        'success'
    """
    app_config = load_config('aggregate_clicks')
    analytics = app_config.get('analytics', {})

    try:
        click_dao = ClickRedisDAO(**redis_config(app_config), prefix=app_prefix())
        aggregator = ClickAggregator(click_dao, timezone=analytics.get('timezone', Defaults.TIMEZONE))
        # fmt: off
        stats = aggregator.drain(batch_size=analytics.get('batch_size', Defaults.AGGREGATION_BATCH_SIZE),
                                 max_batches=analytics.get('max_batches', Defaults.AGGREGATION_MAX_BATCHES))
        # fmt: on
    except DataStoreError as error:
        logger.exception(
            'Failed to aggregate click events.',
            extra={'event': ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)
    else:
        return response_success(stats=stats)
