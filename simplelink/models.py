from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any

from simplelink.constants import Defaults


def isoformat_utc(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with a trailing 'Z'."""
    return moment.astimezone(UTC).isoformat(timespec='seconds').replace('+00:00', 'Z')


# fmt: off
@dataclass(frozen=True)
class LinkModel:
    owner_id: int                       # Id of the user who created the link
    original_url: str                   # Absolute http(s) target URL
    short_code: str                     # Globally unique path segment
    created_at: datetime                # Creation moment (timezone-aware)
    id: int | None = None               # Assigned by the data store on insert
    clicks: int = 0                     # Aggregated click counter (derived)

    def to_json(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.owner_id,
            'original_url': self.original_url,
            'short_code': self.short_code,
            'created_at': isoformat_utc(self.created_at),
            'clicks': self.clicks,
        }


@dataclass(frozen=True)
class ClickEventModel:
    link_id: int                        # Clicked link
    timestamp: datetime                 # Moment of the redirect (timezone-aware)
    source: str = Defaults.CLICK_SOURCE # Attribution tag from ?source=


@dataclass(frozen=True)
class UserModel:
    email: str                          # Unique, lower-cased email address
    password_hash: str                  # bcrypt hash
    is_admin: bool = False              # First registered user is the admin
    id: int | None = None               # Assigned by the data store on insert

    def to_json(self) -> dict[str, Any]:
        return {'id': self.id, 'email': self.email}


@dataclass(frozen=True)
class PrincipalModel:
    user_id: int                        # Bearer token subject
    email: str
    is_admin: bool = False


@dataclass(frozen=True)
class DailyClicksModel:
    date: str                           # Calendar day as YYYY-MM-DD
    clicks: int

    def to_json(self) -> dict[str, Any]:
        return {'date': self.date, 'clicks': self.clicks}


@dataclass(frozen=True)
class SourceClicksModel:
    source: str
    count: int

    def to_json(self) -> dict[str, Any]:
        return {'source': self.source, 'count': self.count}
# fmt: on
