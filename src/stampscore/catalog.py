"""Platform catalog: which providers belong to which platform.

The catalog is read-only input. It is either the built-in DEFAULT_CATALOG or
a JSON file shaped like:

    [
      {
        "platform": "Brightid",
        "name": "BrightID",
        "icon": "./assets/brightidStampIcon.svg",
        "providers": [
          {"platformGroup": "Account Name", "providers": [{"title": "Encrypted", "name": "Brightid"}]}
        ]
      }
    ]
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional


@dataclass(frozen=True)
class ProviderSpec:
    title: str
    name: str


@dataclass(frozen=True)
class ProviderGroup:
    platform_group: str
    providers: tuple[ProviderSpec, ...] = ()


@dataclass(frozen=True)
class PlatformCatalogEntry:
    """Static descriptor of one platform and its providers."""
    platform: str
    name: str
    icon: str = ""
    description: str = ""
    website: str = ""
    groups: tuple[ProviderGroup, ...] = ()

    @property
    def provider_ids(self) -> tuple[str, ...]:
        """Provider names across all groups, in catalog order."""
        return tuple(p.name for g in self.groups for p in g.providers)

    @classmethod
    def from_dict(cls, d: dict) -> "PlatformCatalogEntry":
        groups = tuple(
            ProviderGroup(
                platform_group=g.get("platformGroup", ""),
                providers=tuple(
                    ProviderSpec(title=p.get("title", ""), name=p["name"])
                    for p in g.get("providers", [])
                ),
            )
            for g in d.get("providers", [])
        )
        return cls(
            platform=d["platform"],
            name=d.get("name", d["platform"]),
            icon=d.get("icon", ""),
            description=d.get("description", ""),
            website=d.get("website", ""),
            groups=groups,
        )


def _entry(platform: str, name: str, icon: str, description: str, website: str,
           groups: Iterable[tuple[str, Iterable[tuple[str, str]]]]) -> PlatformCatalogEntry:
    return PlatformCatalogEntry(
        platform=platform,
        name=name,
        icon=icon,
        description=description,
        website=website,
        groups=tuple(
            ProviderGroup(group, tuple(ProviderSpec(title, pid) for title, pid in providers))
            for group, providers in groups
        ),
    )


DEFAULT_CATALOG: tuple[PlatformCatalogEntry, ...] = (
    _entry(
        "Brightid", "BrightID", "./assets/brightidStampIcon.svg",
        "Connect to BrightID to verify your identity on Web3 without revealing any personal information.",
        "https://brightid.org/",
        [("Account Name", [("Encrypted", "Brightid")])],
    ),
    _entry(
        "Civic", "Civic", "./assets/civicStampIcon.svg",
        "Connect to Civic to verify your identity with a Civic Pass.",
        "https://www.civic.com/",
        [
            ("Captcha Pass", [("holds a Civic Captcha Pass", "CivicCaptchaPass")]),
            ("Uniqueness Pass", [("holds a Civic Uniqueness Pass", "CivicUniquenessPass")]),
            ("Liveness Pass", [("holds a Civic Liveness Pass", "CivicLivenessPass")]),
            ("ID Verification Pass", [("holds a Civic ID Verification Pass", "CivicIDVPass")]),
        ],
    ),
)


def load_catalog(path: Optional[str] = None) -> tuple[PlatformCatalogEntry, ...]:
    """Load a catalog from a JSON file, or return DEFAULT_CATALOG when path is None."""
    if path is None:
        return DEFAULT_CATALOG
    data = json.loads(Path(path).read_text())
    if not isinstance(data, list):
        raise ValueError(f"Platform catalog {path} must be a JSON list")
    return tuple(PlatformCatalogEntry.from_dict(d) for d in data)
