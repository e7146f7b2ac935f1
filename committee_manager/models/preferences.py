"""
Owner Profile and Application Preferences

Both live in the `settings` collection of the document store:
- `settings/app` holds language, theme and credentials
- `settings/singleton` holds the owner's profile
"""

from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    EN = "en"
    UR = "ur"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class AuthMethod(str, Enum):
    PIN = "pin"
    PASSWORD = "password"


class PinLength(IntEnum):
    FOUR = 4
    SIX = 6
    EIGHT = 8


class UserProfile(BaseModel):
    """The shop owner's profile."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    phone: str = ""
    cnic: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    profile_picture_url: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class AppPreferences(BaseModel):
    """
    Application-wide settings, including the unlock credential.

    `app_pin` holds either a numeric PIN or a password depending on
    `auth_method`.
    """

    language: Language = Language.EN
    theme: Theme = Theme.LIGHT
    app_pin: str = Field(default="1234")
    auth_method: AuthMethod = AuthMethod.PIN
    pin_length: PinLength = PinLength.FOUR

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
