"""Platform-level identifier and locale sources."""

import locale
from abc import ABC, abstractmethod

from usertrack.config import UNAVAILABLE_ADVERTISING_ID, Settings


def is_valid_country_code(code: str | None) -> bool:
    """Two-letter ISO code."""
    return bool(code) and len(code) == 2 and code.isalpha()


def is_valid_currency_code(code: str | None) -> bool:
    """Three-letter ISO code."""
    return bool(code) and len(code) == 3 and code.isalpha()


def is_valid_language_code(code: str | None) -> bool:
    """Language with region, e.g. ``en-GB``."""
    return bool(code) and "-" in code and len(code) >= 5


class PlatformIdentifiers(ABC):
    """Sources of platform-provided identity and locale values."""

    @abstractmethod
    def advertising_identifier(self) -> str | None:
        """Preferred advertising id; may be the all-zero unavailable sentinel."""
        ...

    @abstractmethod
    def vendor_identifier(self) -> str | None:
        """Publisher-scoped id, None when unavailable."""
        ...

    @abstractmethod
    def region_code(self) -> str | None:
        """Current locale region, e.g. ``IN``."""
        ...

    @abstractmethod
    def language_code(self) -> str | None:
        """Current locale language, e.g. ``en``."""
        ...


class SettingsPlatform(PlatformIdentifiers):
    """Identifiers from configured overrides, locale from the process."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _locale_parts(self) -> tuple[str | None, str | None]:
        name, _ = locale.getlocale()
        if not name or name in ("C", "POSIX"):
            return None, None
        language, _, region = name.partition("_")
        return language or None, region[:2] or None

    def advertising_identifier(self) -> str | None:
        return self.settings.advertising_id or UNAVAILABLE_ADVERTISING_ID

    def vendor_identifier(self) -> str | None:
        return self.settings.vendor_id

    def region_code(self) -> str | None:
        if self.settings.region_code:
            return self.settings.region_code
        return self._locale_parts()[1]

    def language_code(self) -> str | None:
        return self._locale_parts()[0]


def current_country_code(platform: PlatformIdentifiers, default: str = "IN") -> str:
    """Upper-cased locale region, or ``default`` when missing or malformed."""
    region = platform.region_code()
    if region and is_valid_country_code(region):
        return region.upper()
    return default


def current_language_code(platform: PlatformIdentifiers, settings: Settings) -> str:
    language = platform.language_code()
    if language:
        return f"{language}-{current_country_code(platform, settings.default_country_code)}"
    return settings.default_language_code
