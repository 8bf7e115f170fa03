"""Abstract base class for User data access objects (DAOs).

Users are looked up by id (bearer token subject) and by email (login), and the
very first registered user claims a one-time bootstrap slot which makes them
the admin.
"""

from abc import ABC, abstractmethod

from simplelink.models import UserModel


class UserBaseDAO(ABC):
    """Interface for user data access objects (DAOs)

    Methods:
        insert(user: UserModel, **kwargs) -> UserModel:
            Persist a new user and assign its id.
            Raises EmailTakenError if the email is already registered.

        get(user_id: int, **kwargs) -> UserModel:
            Raises UserDoesNotExistError if the user does not exist.

        get_by_email(email: str, **kwargs) -> UserModel:
            Raises UserDoesNotExistError if the email is not registered.

        count(**kwargs) -> int:
            Number of registered users.

        claim_bootstrap(email: str, **kwargs) -> None:
            Atomically claim the first-user slot.
            Raises BootstrapClosedError if it was claimed before.

        seal_bootstrap(email: str, **kwargs) -> bool:
            Close the slot for good once `email` is stored as admin.

        release_bootstrap(email: str, **kwargs) -> bool:
            Reopen the slot after storing `email` failed.

        bootstrap_claimed(**kwargs) -> bool:
            Whether the slot is claimed (in flight or sealed).

    All methods raise DataStoreError on data store failures.
    """

    @abstractmethod
    def insert(self, user: UserModel, **kwargs) -> UserModel:
        pass

    @abstractmethod
    def get(self, user_id: int, **kwargs) -> UserModel:
        pass

    @abstractmethod
    def get_by_email(self, email: str, **kwargs) -> UserModel:
        pass

    @abstractmethod
    def count(self, **kwargs) -> int:
        pass

    @abstractmethod
    def claim_bootstrap(self, email: str, **kwargs) -> None:
        """Atomically claim the first-user (admin) bootstrap slot

        NOTE: Implementations must guarantee that of any number of concurrent
              claims for different emails exactly one succeeds. The slot only
              reopens through release_bootstrap() or when an unsealed claim
              expires. Claiming again with the winning email succeeds.

        Raises:
            BootstrapClosedError:
                If the slot was already claimed.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def seal_bootstrap(self, email: str, **kwargs) -> bool:
        """Make the claim held by `email` permanent

        Returns:
            bool: False if `email` does not hold the claim.
        """
        pass

    @abstractmethod
    def release_bootstrap(self, email: str, **kwargs) -> bool:
        """Drop the claim held by `email`

        Returns:
            bool: False if `email` does not hold the claim.
        """
        pass

    @abstractmethod
    def bootstrap_claimed(self, **kwargs) -> bool:
        pass
