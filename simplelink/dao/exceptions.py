"""Exceptions related to Data Access Objects (DAO) operations.

DAO exceptions describe data store outcomes only. The service layer translates
them into the HTTP-facing hierarchy of `simplelink.exceptions`.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    LinkNotFoundError:
        Raised when a link (by id or by shortcode) is not found in the data store.

    ShortCodeTakenError:
        Raised when a shortcode is already reserved by another link.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

    UserDoesNotExistError:
        Raised when a user is not found in the data store.

    EmailTakenError:
        Raised when attempting to insert a user whose email is already registered.

    BootstrapClosedError:
        Raised when the first-user (admin) bootstrap slot has already been claimed.

Example:
    >>> from simplelink.dao.exceptions import ShortCodeTakenError
    >>> raise ShortCodeTakenError("Shortcode 'abc' is already taken.")
    Traceback (most recent call last):
        ...
    simplelink.dao.exceptions.ShortCodeTakenError: Shortcode 'abc' is already taken.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class LinkNotFoundError(DAOError):
    """Exception raised when a LinkModel is not found in the data store."""

    pass


class ShortCodeTakenError(DAOError):
    """Exception raised when a shortcode is already reserved in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    pass


class UserDoesNotExistError(DAOError):
    """Exception raised when a user is not found in the data store."""

    pass


class EmailTakenError(DAOError):
    """Exception raised when attempting to insert a user with an already registered email."""

    pass


class BootstrapClosedError(DAOError):
    """Exception raised when the first-user bootstrap slot was already claimed."""

    pass
