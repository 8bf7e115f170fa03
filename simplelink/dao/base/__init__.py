from simplelink.dao.base.link_base_dao import LinkBaseDAO
from simplelink.dao.base.user_base_dao import UserBaseDAO
from simplelink.dao.base.click_base_dao import ClickBaseDAO


__all__ = [
    'LinkBaseDAO',
    'UserBaseDAO',
    'ClickBaseDAO',
]
