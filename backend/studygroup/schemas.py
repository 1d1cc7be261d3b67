"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable. They only carry types;
field-level rules (lengths, formats, uniqueness) live in
`studygroup.validators` so the services can check them before any
mutation.
"""

from pydantic import BaseModel
from typing import List, Optional


class RegisterIn(BaseModel):
    """Payload for account registration."""
    nickname: str
    email: str
    password: str


class LoginIn(BaseModel):
    """Login payload; `login` is either a nickname or an email."""
    login: str
    password: str


class TokenOut(BaseModel):
    """Authentication response containing an access token."""
    access_token: str


class ProfileForm(BaseModel):
    """Editable profile fields."""
    bio: Optional[str] = None
    url: Optional[str] = None
    occupation: Optional[str] = None
    location: Optional[str] = None
    profile_image: Optional[str] = None

    @classmethod
    def from_account(cls, account) -> "ProfileForm":
        return cls(
            bio=account.bio,
            url=account.url,
            occupation=account.occupation,
            location=account.location,
            profile_image=account.profile_image,
        )


class PasswordForm(BaseModel):
    """New password with its confirmation."""
    new_password: str
    new_password_confirm: str


class NicknameForm(BaseModel):
    nickname: str


class Notifications(BaseModel):
    """Snapshot of the six notification flags of an account.

    Built from an `Account` for display and applied back to it on
    submit; it has no identity of its own. A submitted form always
    carries all six flags: any flag left out reads as False (an
    unchecked box) and is copied onto the account as such, even where
    `Account` defaults it to True.
    """
    study_created_by_email: bool = False
    study_created_by_web: bool = False
    study_enrollment_result_by_email: bool = False
    study_enrollment_result_by_web: bool = False
    study_updated_by_email: bool = False
    study_updated_by_web: bool = False

    @classmethod
    def from_account(cls, account) -> "Notifications":
        return cls(**{name: getattr(account, name) for name in cls.model_fields})


class TagForm(BaseModel):
    tag_title: str


class ZoneForm(BaseModel):
    """A zone reference in its display form `city(localName)/province`."""
    zone_name: str

    @property
    def city_name(self) -> str:
        return self.zone_name[:self.zone_name.find('(')].strip()

    @property
    def province_name(self) -> str:
        return self.zone_name[self.zone_name.find('/') + 1:].strip()

    @property
    def local_name_of_city(self) -> str:
        return self.zone_name[self.zone_name.find('(') + 1:self.zone_name.find(')')].strip()

    def is_well_formed(self) -> bool:
        """True when the name has the `city(localName)/province` shape."""
        open_at = self.zone_name.find('(')
        close_at = self.zone_name.find(')')
        slash_at = self.zone_name.find('/')
        return 0 < open_at < close_at < slash_at < len(self.zone_name) - 1


class TagsOut(BaseModel):
    tags: List[str]
    whitelist: List[str] = []


class ZonesOut(BaseModel):
    zones: List[str]
    whitelist: List[str] = []


class MessageOut(BaseModel):
    message: str
