"""Release marker persistence.

The manifest records the commit the last release was cut from, so the
next run only looks at commits made since then::

    {
      "last-release": "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
    }
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


class ReleaseManifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    last_release: str = Field(alias="last-release", min_length=1)


def load_manifest(path: Path) -> ReleaseManifest | None:
    """Read the release manifest, None if it does not exist yet.

    Raises:
        ConfigError: If the file exists but is not a valid manifest.
    """
    if not path.exists():
        return None
    try:
        return ReleaseManifest.model_validate_json(path.read_text())
    except ValidationError as e:
        raise ConfigError(f"{path}: invalid release manifest:\n{e}") from e


def dump_manifest(last_release: str) -> str:
    """Render a manifest recording ``last_release`` as the release point."""
    manifest = ReleaseManifest(last_release=last_release)
    return manifest.model_dump_json(by_alias=True, indent=2) + "\n"
