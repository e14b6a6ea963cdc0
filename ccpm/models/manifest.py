import re
from functools import lru_cache
from typing import List, Union

from license_expression import ExpressionError, Licensing, get_spdx_licensing
from pydantic import BaseModel, Field, ValidationError

from ccpm.errors import (InvalidLicenseError, MalformedManifestError,
                         MissingAuthorsError, MissingMaintainersError)


@lru_cache(maxsize=None)
def _licensing() -> Licensing:
    return get_spdx_licensing()


# User defined license ids
_LICENSE_REF = re.compile(r"^(?:DocumentRef-[A-Za-z0-9.\-]+:)?LicenseRef-[A-Za-z0-9.\-]+$")


def check_license(expression: str) -> None:
    """
    Raises InvalidLicenseError unless the given text parses as an SPDX license expression made of known license ids
    or LicenseRef ids.
    """
    if not expression.strip():
        raise InvalidLicenseError(expression, "empty license expression")
    licensing = _licensing()
    try:
        parsed = licensing.parse(expression, strict=True)
    except ExpressionError as exc:
        raise InvalidLicenseError(expression, str(exc)) from exc
    unknown_keys = [
        key for key in licensing.unknown_license_keys(parsed, unique=True) if not _LICENSE_REF.match(key)
    ]
    if unknown_keys:
        raise InvalidLicenseError(expression, f"unknown license key(s): {', '.join(unknown_keys)}")


class PackageBase(BaseModel):
    """
    Descriptive package metadata shared by package manifests and index entries.
    """

    description: str = Field(..., description="A short summary of what the package does.")
    license: str = Field(..., description="SPDX license expression e.g. 'MIT' or 'Apache-2.0 OR MIT'.")
    authors: List[str] = Field(..., description="The people who wrote the package.")
    maintainers: List[str] = Field(..., description="The people currently looking after the package.")

    def base(self) -> "PackageBase":
        """
        Returns only the shared metadata fields of this model.
        """
        return PackageBase(
            description=self.description,
            license=self.license,
            authors=list(self.authors),
            maintainers=list(self.maintainers),
        )


class PackageManifest(PackageBase):
    """
    The manifest.json document found at the root of every package directory.
    """

    version: str = Field(..., description="Free-form version string; not ordered in any way.")
    dependencies: List[str] = Field(..., description="Names of required packages, copied verbatim into the index.")

    def verify(self) -> None:
        """
        Checks the manifest for missing people and an invalid license.

        :raises MissingAuthorsError: If there are no authors.
        :raises MissingMaintainersError: If there are no maintainers.
        :raises InvalidLicenseError: If the license is not a valid SPDX expression.
        """
        if not self.authors:
            raise MissingAuthorsError()
        if not self.maintainers:
            raise MissingMaintainersError()
        check_license(self.license)

    @staticmethod
    def from_json(raw: Union[str, bytes]) -> "PackageManifest":
        """
        Parses a manifest document.

        :raises MalformedManifestError: If the document is not valid JSON or does not have the expected structure.
        """
        try:
            return PackageManifest.model_validate_json(raw)
        except ValidationError as exc:
            raise MalformedManifestError(f"malformed package manifest: {exc}") from exc
