"""Auth Service: registration, login and bearer token validation

Tokens are stateless HS256 JWTs signed with the `jwt_secret` of the auth
secret (see simplelink.utils.secrets). Registration follows the first-user rule:

    - while no user exists, registration is open and the new user becomes
      admin (guarded by an atomic bootstrap claim and, if configured, by the
      admin setup token);
    - afterwards, `admin_token` must be the bearer token of an admin user.

Classes:
    TokenCodec:
        Issues and validates bearer tokens. Needs no data store, so
        authenticated Lambdas use it directly.

    AuthService:
        User registration and login on top of a UserBaseDAO and a TokenCodec.
"""

import hmac
import logging
from datetime import datetime, timedelta, UTC

import jwt
import bcrypt

from simplelink.constants import TTL, Defaults
from simplelink.models import PrincipalModel, UserModel
from simplelink.dao.base import UserBaseDAO
from simplelink.dao.exceptions import BootstrapClosedError, DAOError, DataStoreError, EmailTakenError, UserDoesNotExistError
from simplelink.exceptions import ForbiddenError, InvalidCredentialsError, UnauthorizedError, ValidationError
from simplelink.utils.validators import normalize_email, validate_password


logger = logging.getLogger(__name__)

JWT_ALGORITHM = 'HS256'


class TokenCodec:
    def __init__(self, jwt_secret: str, token_ttl: int = TTL.ONE_DAY):
        self.jwt_secret = jwt_secret
        self.token_ttl = token_ttl

    def issue(self, user: UserModel) -> str:
        now = datetime.now(UTC)
        claims = {
            'sub': str(user.id),
            'email': user.email,
            'admin': user.is_admin,
            'iat': now,
            'exp': now + timedelta(seconds=self.token_ttl),
        }
        return jwt.encode(claims, self.jwt_secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> PrincipalModel:
        """Decode a token into the principal it was issued to

        Raises:
            UnauthorizedError: Bad signature, malformed or expired token.
        """
        try:
            claims = jwt.decode(token, self.jwt_secret, algorithms=[JWT_ALGORITHM], options={'require': ['exp', 'iat', 'sub']})
            return PrincipalModel(user_id=int(claims['sub']), email=claims.get('email', ''), is_admin=bool(claims.get('admin')))
        except (jwt.InvalidTokenError, ValueError) as e:
            raise UnauthorizedError('Invalid or expired token') from e

    def authenticate(self, authorization: str | None) -> PrincipalModel:
        """Validate an `Authorization: Bearer <token>` header value

        Raises:
            UnauthorizedError: Missing, malformed, invalid or expired token.
        """
        if not authorization:
            raise UnauthorizedError('Missing bearer token')

        scheme, _, token = authorization.strip().partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            raise UnauthorizedError('Malformed Authorization header')
        return self.verify(token.strip())


class AuthService:
    def __init__(
        self,
        user_dao: UserBaseDAO,
        jwt_secret: str,
        admin_setup_token: str | None = None,
        token_ttl: int = TTL.ONE_DAY,
        bcrypt_rounds: int = Defaults.BCRYPT_ROUNDS,
    ):
        self.user_dao = user_dao
        self.tokens = TokenCodec(jwt_secret, token_ttl=token_ttl)
        self.admin_setup_token = admin_setup_token
        self.bcrypt_rounds = bcrypt_rounds

    def register(self, email: object, password: object, admin_token: str | None = None) -> tuple[str, UserModel]:
        """Register a user and issue its first token

        Returns:
            tuple[str, UserModel]: (bearer token, stored user)

        Raises:
            ValidationError: Malformed email/password or email already registered.
            ForbiddenError: Not the first user and `admin_token` is not an admin's token.
        """
        email = normalize_email(email)
        password = validate_password(password)

        is_admin = self._claim_bootstrap(email, admin_token)
        if not is_admin:
            self._require_admin(admin_token)

        password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode('utf-8')
        try:
            user = self.user_dao.insert(UserModel(email=email, password_hash=password_hash, is_admin=is_admin))
        except EmailTakenError as e:
            self._release_bootstrap(email, is_admin)
            raise ValidationError('Email already registered') from e
        except DAOError:
            self._release_bootstrap(email, is_admin)
            raise

        if is_admin:
            self._seal_bootstrap(email)

        logger.info('Registered user.', extra={'event': 'USER_REGISTERED', 'userId': user.id, 'admin': user.is_admin})
        return self.tokens.issue(user), user

    def login(self, email: object, password: object) -> tuple[str, UserModel]:
        """Exchange email and password for a bearer token

        Raises:
            ValidationError: If email or password is missing.
            InvalidCredentialsError: Unknown email or wrong password.
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError('Email and password are required')

        try:
            user = self.user_dao.get_by_email(email.strip().lower())
        except UserDoesNotExistError as e:
            raise InvalidCredentialsError('Invalid credentials') from e

        try:
            matches = bcrypt.checkpw(password.encode('utf-8'), user.password_hash.encode('utf-8'))
        except ValueError:
            matches = False
        if not matches:
            raise InvalidCredentialsError('Invalid credentials')

        logger.info('User logged in.', extra={'event': 'USER_LOGGED_IN', 'userId': user.id})
        return self.tokens.issue(user), user

    def check_first_user(self) -> bool:
        """True while no user exists and no first registration is in flight"""
        return self.user_dao.count() == 0 and not self.user_dao.bootstrap_claimed()

    def authenticate(self, authorization: str | None) -> PrincipalModel:
        return self.tokens.authenticate(authorization)

    def _claim_bootstrap(self, email: str, admin_token: str | None) -> bool:
        """Try to register `email` as the first (admin) user

        Returns:
            bool: True if this registration owns the bootstrap slot.
        """
        if self.user_dao.count() > 0:
            return False

        if self.admin_setup_token is not None:
            presented = (admin_token or '').encode('utf-8')
            if not hmac.compare_digest(presented, self.admin_setup_token.encode('utf-8')):
                raise ForbiddenError('Invalid admin setup token')

        try:
            self.user_dao.claim_bootstrap(email)
        except BootstrapClosedError:
            # Lost the race against a concurrent first registration
            return False
        return True

    def _release_bootstrap(self, email: str, is_admin: bool) -> None:
        if not is_admin:
            return
        try:
            self.user_dao.release_bootstrap(email)
        except DataStoreError:
            # The unsealed claim expires on its own
            logger.warning('Failed to release first-user claim.', extra={'event': 'BOOTSTRAP_RELEASE_FAILED'})

    def _seal_bootstrap(self, email: str) -> None:
        try:
            self.user_dao.seal_bootstrap(email)
        except DataStoreError:
            # The stored admin keeps the slot closed through count()
            logger.warning('Failed to seal first-user claim.', extra={'event': 'BOOTSTRAP_SEAL_FAILED'})

    def _require_admin(self, admin_token: str | None) -> None:
        if not admin_token:
            raise ForbiddenError('Registration requires an admin token')

        try:
            principal = self.tokens.verify(admin_token)
            admin = self.user_dao.get(principal.user_id)
        except (UnauthorizedError, UserDoesNotExistError) as e:
            raise ForbiddenError('Invalid admin token') from e

        if not admin.is_admin:
            raise ForbiddenError('Only admins can register new users')
