"""Social network → profile URL resolution.

Known platforms form a closed enumeration, each with exactly one column and
one URL template. Anything else is an :class:`UnknownPlatform`, which gets a
synthesized ``<type>Url`` column holding the raw profile text rather than a
URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SocialPlatform(str, Enum):
    """Platforms with a canonical profile URL."""

    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    SKYPE = "skype"
    TELEGRAM = "telegram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    GITHUB = "github"
    DISCORD = "discord"
    WHATSAPP = "whatsapp"
    SNAPCHAT = "snapchat"
    PINTEREST = "pinterest"
    REDDIT = "reddit"
    TUMBLR = "tumblr"
    MEDIUM = "medium"
    BEHANCE = "behance"
    DRIBBBLE = "dribbble"

    @property
    def column(self) -> str:
        return f"{self.value}Url"

    def profile_url(self, profile: str) -> str:
        return _URL_TEMPLATES[self].format(profile=profile)


_URL_TEMPLATES: dict[SocialPlatform, str] = {
    SocialPlatform.LINKEDIN: "https://linkedin.com/in/{profile}",
    SocialPlatform.FACEBOOK: "https://facebook.com/{profile}",
    SocialPlatform.INSTAGRAM: "https://instagram.com/{profile}",
    SocialPlatform.TWITTER: "https://twitter.com/{profile}",
    SocialPlatform.SKYPE: "skype:{profile}?chat",
    SocialPlatform.TELEGRAM: "https://t.me/{profile}",
    SocialPlatform.YOUTUBE: "https://youtube.com/@{profile}",
    SocialPlatform.TIKTOK: "https://tiktok.com/@{profile}",
    SocialPlatform.GITHUB: "https://github.com/{profile}",
    SocialPlatform.DISCORD: "discord:{profile}",
    SocialPlatform.WHATSAPP: "https://wa.me/{profile}",
    SocialPlatform.SNAPCHAT: "https://snapchat.com/add/{profile}",
    SocialPlatform.PINTEREST: "https://pinterest.com/{profile}",
    SocialPlatform.REDDIT: "https://reddit.com/u/{profile}",
    SocialPlatform.TUMBLR: "https://{profile}.tumblr.com",
    SocialPlatform.MEDIUM: "https://medium.com/@{profile}",
    SocialPlatform.BEHANCE: "https://behance.net/{profile}",
    SocialPlatform.DRIBBBLE: "https://dribbble.com/{profile}",
}

SOCIAL_COLUMNS: tuple[str, ...] = tuple(p.column for p in SocialPlatform)


@dataclass(frozen=True)
class UnknownPlatform:
    """A platform outside the enumeration; stores the profile as-is."""

    name: str

    @property
    def column(self) -> str:
        return f"{self.name}Url"

    def profile_url(self, profile: str) -> str:
        return profile


def lookup_platform(type_name: str) -> SocialPlatform | UnknownPlatform:
    """Resolve a network ``type`` (case-insensitive) to its platform."""
    key = type_name.lower()
    try:
        return SocialPlatform(key)
    except ValueError:
        return UnknownPlatform(key)


def resolve_social_links(networks: Any) -> dict[str, str | None]:
    """Map ``[{type, profile}, ...]`` to social columns.

    All known platform columns are present in the output, ``None`` unless
    the input supplies them. Entries missing ``type`` or ``profile`` are
    skipped.
    """
    links: dict[str, str | None] = dict.fromkeys(SOCIAL_COLUMNS)

    if not isinstance(networks, list):
        return links

    for network in networks:
        if not isinstance(network, dict):
            continue
        type_name = network.get("type")
        profile = network.get("profile")
        if not type_name or not profile:
            continue

        platform = lookup_platform(str(type_name))
        links[platform.column] = platform.profile_url(str(profile))

    return links
