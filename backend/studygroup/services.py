"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and validators. Every update follows the same two steps: validate the
submitted form, and only when it is clean apply the change to the
account and persist it through its repository. A rejected update
raises `ValidationError` and leaves the account untouched.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

import jwt
from passlib.context import CryptContext
from sqlmodel import Session

from . import models, repositories
from .config import settings
from .exceptions import FieldError, INVALID_FORMAT, NotFoundError, ValidationError
from .schemas import NicknameForm, Notifications, PasswordForm, ProfileForm, ZoneForm
from .utils.zone_loader import load_zones_csv
from .validators import (
    validate_email,
    validate_nickname,
    validate_password,
    validate_profile,
)

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
logger = logging.getLogger(__name__)


def issue_token(account: models.Account) -> str:
    """Return a signed JWT identifying `account`."""
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
    payload = {"account_id": account.id, "nickname": account.nickname, "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


class AuthService:
    """Registration and authentication of accounts."""
    def __init__(self, session: Session):
        self.session = session
        self.account_repo = repositories.AccountRepository(session)

    def register(self, nickname: str, email: str, password: str) -> models.Account:
        """Create a new account with a hashed password.

        Nickname and email must be unused; the password follows the same
        length rule as a password change. Returns the persisted `Account`.
        """
        errors = validate_nickname(self.account_repo, nickname) + validate_email(self.account_repo, email)
        errors += [
            FieldError('password', e.code, e.message)
            for e in validate_password(PasswordForm(new_password=password, new_password_confirm=password))
        ]
        if errors:
            raise ValidationError(errors)
        account = models.Account(nickname=nickname, email=email, password_hash=PWD_CTX.hash(password))
        account = self.account_repo.create(account)
        logger.info("account registered id=%s nickname=%s", account.id, account.nickname)
        return account

    def authenticate(self, login: str, password: str) -> Optional[str]:
        """Verify credentials and return a signed JWT token on success.

        `login` may be a nickname or an email. Returns `None` if
        authentication fails.
        """
        account = self.account_repo.get_by_email(login) if '@' in login else self.account_repo.get_by_nickname(login)
        if not account:
            return None
        if not PWD_CTX.verify(password, account.password_hash):
            return None
        return issue_token(account)


class SettingsService:
    """Profile, password, nickname and notification updates."""
    def __init__(self, session: Session):
        self.session = session
        self.account_repo = repositories.AccountRepository(session)

    def update_profile(self, account: models.Account, form: ProfileForm) -> models.Account:
        """Overwrite the profile fields of `account` with `form`."""
        errors = validate_profile(form)
        if errors:
            raise ValidationError(errors)
        account.bio = form.bio
        account.url = form.url
        account.occupation = form.occupation
        account.location = form.location
        account.profile_image = form.profile_image
        logger.info("profile updated account_id=%s", account.id)
        return self.account_repo.save(account)

    def update_password(self, account: models.Account, form: PasswordForm) -> models.Account:
        """Replace the stored password hash; hashing is delegated to passlib."""
        errors = validate_password(form)
        if errors:
            raise ValidationError(errors)
        account.password_hash = PWD_CTX.hash(form.new_password)
        logger.info("password updated account_id=%s", account.id)
        return self.account_repo.save(account)

    def update_nickname(self, account: models.Account, form: NicknameForm) -> models.Account:
        """Rename `account` when the new nickname is well formed and unused."""
        errors = validate_nickname(self.account_repo, form.nickname, exclude_account_id=account.id)
        if errors:
            raise ValidationError(errors)
        previous = account.nickname
        account.nickname = form.nickname
        logger.info("nickname updated account_id=%s %s -> %s", account.id, previous, form.nickname)
        return self.account_repo.save(account)

    def update_notifications(self, account: models.Account, form: Notifications) -> models.Account:
        """Copy all six notification flags from `form` onto `account`."""
        for name in Notifications.model_fields:
            setattr(account, name, getattr(form, name))
        logger.info("notifications updated account_id=%s", account.id)
        return self.account_repo.save(account)

    def notifications_of(self, account: models.Account) -> Notifications:
        return Notifications.from_account(account)


class TagService:
    """Resolution of tag titles to `Tag` rows."""
    def __init__(self, session: Session):
        self.session = session
        self.tag_repo = repositories.TagRepository(session)

    def resolve_or_create_tag(self, title: str) -> models.Tag:
        """Return the tag called `title`, creating it on first reference."""
        title = (title or '').strip()
        if not title:
            raise ValidationError([FieldError('tag_title', INVALID_FORMAT, 'tag title must not be empty')])
        tag = self.tag_repo.get_by_title(title)
        if tag is None:
            tag = self.tag_repo.create(models.Tag(title=title))
            logger.info("tag created title=%s", title)
        return tag

    def find_tag(self, title: str) -> models.Tag:
        """Return an existing tag or raise `NotFoundError`."""
        tag = self.tag_repo.get_by_title((title or '').strip())
        if tag is None:
            raise NotFoundError('tag', title)
        return tag

    def whitelist(self) -> List[str]:
        """All known tag titles, offered to clients as suggestions."""
        return [t.title for t in self.tag_repo.list_all()]


class ZoneService:
    """Resolution of zone display names and zone seeding."""
    def __init__(self, session: Session):
        self.session = session
        self.zone_repo = repositories.ZoneRepository(session)

    def resolve_zone(self, zone_name: str) -> models.Zone:
        """Look up the zone named `city(localName)/province`.

        Only `city` and `province` take part in the lookup. Zones are
        never created here; an unknown or malformed name raises
        `NotFoundError`.
        """
        form = ZoneForm(zone_name=zone_name or '')
        if not form.is_well_formed():
            raise NotFoundError('zone', zone_name)
        zone = self.zone_repo.get_by_city_and_province(form.city_name, form.province_name)
        if zone is None:
            raise NotFoundError('zone', zone_name)
        return zone

    def whitelist(self) -> List[str]:
        """Display names of every known zone."""
        return [str(z) for z in self.zone_repo.list_all()]

    def init_zone_data(self, csv_path: Path) -> int:
        """Seed zones from `csv_path` when the zone table is empty.

        Returns the number of zones created; 0 when zones already exist
        or the file is missing.
        """
        if self.zone_repo.count() > 0:
            return 0
        if not csv_path.exists():
            logger.warning("zone data file not found: %s", csv_path)
            return 0
        created = self.zone_repo.create_all(load_zones_csv(csv_path))
        logger.info("seeded %s zones from %s", created, csv_path)
        return created


class AssociationService:
    """Idempotent add/remove of tags and zones on an account.

    Membership is decided by natural key. Adding a member already present
    or removing one that is absent changes nothing and is not an error.
    Callers resolve the `Tag`/`Zone` first (see `TagService` and
    `ZoneService`).
    """
    def __init__(self, session: Session):
        self.session = session
        self.account_repo = repositories.AccountRepository(session)

    def add_tag(self, account: models.Account, tag: models.Tag) -> None:
        if account.has_tag(tag):
            return
        account.tags.append(tag)
        self.account_repo.save(account)
        logger.info("tag added account_id=%s tag=%s", account.id, tag.title)

    def remove_tag(self, account: models.Account, tag: models.Tag) -> None:
        members = [t for t in account.tags if t.title == tag.title]
        if not members:
            return
        for t in members:
            account.tags.remove(t)
        self.account_repo.save(account)
        logger.info("tag removed account_id=%s tag=%s", account.id, tag.title)

    def add_zone(self, account: models.Account, zone: models.Zone) -> None:
        if account.has_zone(zone):
            return
        account.zones.append(zone)
        self.account_repo.save(account)
        logger.info("zone added account_id=%s zone=%s", account.id, zone)

    def remove_zone(self, account: models.Account, zone: models.Zone) -> None:
        members = [z for z in account.zones if z.natural_key() == zone.natural_key()]
        if not members:
            return
        for z in members:
            account.zones.remove(z)
        self.account_repo.save(account)
        logger.info("zone removed account_id=%s zone=%s", account.id, zone)

    def tags_of(self, account: models.Account) -> List[str]:
        return sorted(t.title for t in account.tags)

    def zones_of(self, account: models.Account) -> List[str]:
        return sorted(str(z) for z in account.zones)
