"""SQLModel data models.

This module defines the application's database tables using SQLModel.
`Account` is the aggregate mutated by the settings services; `Tag` and
`Zone` are reference entities linked to accounts many-to-many through
the link tables below. The composite primary keys on the link tables
keep each association a set at the storage level.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from datetime import datetime, timezone
from typing import List


class AccountTagLink(SQLModel, table=True):
    """Association row between an `Account` and a `Tag`."""
    account_id: Optional[int] = Field(default=None, foreign_key='account.id', primary_key=True)
    tag_id: Optional[int] = Field(default=None, foreign_key='tag.id', primary_key=True)


class AccountZoneLink(SQLModel, table=True):
    """Association row between an `Account` and a `Zone`."""
    account_id: Optional[int] = Field(default=None, foreign_key='account.id', primary_key=True)
    zone_id: Optional[int] = Field(default=None, foreign_key='zone.id', primary_key=True)


class Tag(SQLModel, table=True):
    """A topic of interest, identified by its unique `title`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(index=True, nullable=False, unique=True)


class Zone(SQLModel, table=True):
    """A geographic region identified by `(city, province)`.

    `local_name_of_city` is display-only and takes no part in lookups or
    equality.
    """
    __table_args__ = (UniqueConstraint('city', 'province'),)

    id: Optional[int] = Field(default=None, primary_key=True)
    city: str = Field(index=True, nullable=False)
    local_name_of_city: str
    province: str = Field(nullable=False)

    def natural_key(self):
        return (self.city, self.province)

    def __str__(self):
        return f"{self.city}({self.local_name_of_city})/{self.province}"


class Account(SQLModel, table=True):
    """A registered study-group member.

    Fields:
    - `nickname` / `email`: unique identities
    - `password_hash`: hashed password string (never store plaintext)
    - profile fields: `bio`, `url`, `occupation`, `location`, `profile_image`
    - six notification flags, web delivery enabled by default
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    nickname: str = Field(index=True, nullable=False, unique=True)
    email: str = Field(index=True, nullable=False, unique=True)
    password_hash: str
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    bio: Optional[str] = None
    url: Optional[str] = None
    occupation: Optional[str] = None
    location: Optional[str] = None
    profile_image: Optional[str] = None

    study_created_by_email: bool = False
    study_created_by_web: bool = True
    study_enrollment_result_by_email: bool = False
    study_enrollment_result_by_web: bool = True
    study_updated_by_email: bool = False
    study_updated_by_web: bool = True

    tags: List[Tag] = Relationship(link_model=AccountTagLink)
    zones: List[Zone] = Relationship(link_model=AccountZoneLink)

    def has_tag(self, tag: Tag) -> bool:
        """Membership by natural key (`title`), not object identity."""
        return any(t.title == tag.title for t in self.tags)

    def has_zone(self, zone: Zone) -> bool:
        """Membership by natural key (`city`, `province`)."""
        return any(z.natural_key() == zone.natural_key() for z in self.zones)
