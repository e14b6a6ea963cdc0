from typing import Dict

from pydantic import BaseModel, Field

from ccpm.models.manifest import PackageManifest
from ccpm.utils.digest import digest_text


class SourceFile(BaseModel):
    content: str
    digest: str = Field(..., description="Lowercase hex SHA-256 of the UTF-8 encoded content.")

    @staticmethod
    def from_content(content: str) -> "SourceFile":
        return SourceFile(content=content, digest=digest_text(content))

    def is_intact(self) -> bool:
        return digest_text(self.content) == self.digest


class Package(PackageManifest):
    """
    A built package: its manifest plus every source file keyed by posix path relative to the source root.

    This is the value serialized into a single artifact.
    """

    files: Dict[str, SourceFile] = {}

    def manifest(self) -> PackageManifest:
        return PackageManifest(**self.model_dump(exclude={"files"}))
