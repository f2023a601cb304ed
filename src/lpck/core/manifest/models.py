"""Model for the package.json fields the pipeline reads."""

from pydantic import BaseModel, ConfigDict, Field


class PackageManifest(BaseModel):
    """Shape check for a package.json document.

    Only the fields lpck relies on are declared. Everything else (scripts,
    files, exports, ...) is accepted as extra, so validating a manifest never
    rejects or drops keys the pipeline does not care about.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str | None = None
    version: str | None = None
    dependencies: dict[str, str] | None = None
    dev_dependencies: dict[str, str] | None = Field(default=None, alias="devDependencies")
    peer_dependencies: dict[str, str] | None = Field(default=None, alias="peerDependencies")
