"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (accounts,
tags, zones). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from typing import List, Optional
from sqlmodel import Session, select
from sqlalchemy import func
from . import models


class AccountRepository:
    """CRUD operations for `Account` objects."""
    def __init__(self, session: Session):
        self.session = session

    def create(self, account: models.Account) -> models.Account:
        """Persist a new account and return the managed instance."""
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return account

    def save(self, account: models.Account) -> models.Account:
        """Flush pending field and association changes of `account`."""
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return account

    def get(self, account_id: int) -> Optional[models.Account]:
        """Get an `Account` by primary key."""
        return self.session.get(models.Account, account_id)

    def get_by_nickname(self, nickname: str) -> Optional[models.Account]:
        """Return an `Account` by nickname or `None` if not found."""
        stmt = select(models.Account).where(models.Account.nickname == nickname)
        return self.session.exec(stmt).first()

    def get_by_email(self, email: str) -> Optional[models.Account]:
        """Return an `Account` by email or `None` if not found."""
        stmt = select(models.Account).where(models.Account.email == email)
        return self.session.exec(stmt).first()

    def delete(self, account: models.Account) -> None:
        """Remove an account together with its association rows."""
        self.session.delete(account)
        self.session.commit()


class TagRepository:
    """Lookup and creation of `Tag` reference entities."""
    def __init__(self, session: Session):
        self.session = session

    def get_by_title(self, title: str) -> Optional[models.Tag]:
        """Return the tag with exactly this `title`, if any."""
        stmt = select(models.Tag).where(models.Tag.title == title)
        return self.session.exec(stmt).first()

    def create(self, tag: models.Tag) -> models.Tag:
        """Persist a new tag."""
        self.session.add(tag)
        self.session.commit()
        self.session.refresh(tag)
        return tag

    def save(self, tag: models.Tag) -> models.Tag:
        """Flush pending changes of `tag`."""
        self.session.add(tag)
        self.session.commit()
        self.session.refresh(tag)
        return tag

    def delete(self, tag: models.Tag) -> None:
        """Remove a tag and detach it from every account holding it."""
        links = self.session.exec(
            select(models.AccountTagLink).where(models.AccountTagLink.tag_id == tag.id)
        ).all()
        for link in links:
            self.session.delete(link)
        self.session.delete(tag)
        self.session.commit()

    def list_all(self) -> List[models.Tag]:
        """Return every known tag ordered by title."""
        stmt = select(models.Tag).order_by(models.Tag.title)
        return self.session.exec(stmt).all()


class ZoneRepository:
    """Lookup and seeding of `Zone` reference entities."""
    def __init__(self, session: Session):
        self.session = session

    def get_by_city_and_province(self, city: str, province: str) -> Optional[models.Zone]:
        """Return the zone matching the natural key exactly."""
        stmt = select(models.Zone).where(
            models.Zone.city == city,
            models.Zone.province == province
        )
        return self.session.exec(stmt).first()

    def create(self, zone: models.Zone) -> models.Zone:
        """Persist a single zone."""
        self.session.add(zone)
        self.session.commit()
        self.session.refresh(zone)
        return zone

    def save(self, zone: models.Zone) -> models.Zone:
        """Flush pending changes of `zone`."""
        self.session.add(zone)
        self.session.commit()
        self.session.refresh(zone)
        return zone

    def delete(self, zone: models.Zone) -> None:
        """Remove a zone and detach it from every account holding it."""
        links = self.session.exec(
            select(models.AccountZoneLink).where(models.AccountZoneLink.zone_id == zone.id)
        ).all()
        for link in links:
            self.session.delete(link)
        self.session.delete(zone)
        self.session.commit()

    def create_all(self, zones: List[models.Zone]) -> int:
        """Persist many zones in one commit and return how many were added."""
        for z in zones:
            self.session.add(z)
        self.session.commit()
        return len(zones)

    def list_all(self) -> List[models.Zone]:
        """Return every zone ordered by province then city."""
        stmt = select(models.Zone).order_by(models.Zone.province, models.Zone.city)
        return self.session.exec(stmt).all()

    def count(self) -> int:
        """Number of zones currently stored."""
        return self.session.exec(select(func.count()).select_from(models.Zone)).one()
