from simplelink.services.allocator import CodeAllocator
from simplelink.services.link_store import LinkStore
from simplelink.services.dispatcher import RedirectDispatcher
from simplelink.services.aggregator import ClickAggregator
from simplelink.services.auth import AuthService, TokenCodec


__all__ = [
    'TokenCodec',
    'CodeAllocator',
    'LinkStore',
    'RedirectDispatcher',
    'ClickAggregator',
    'AuthService',
]
