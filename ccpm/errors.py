from typing import Optional


class BuildError(Exception):
    """
    Base class for every failure raised while building or reading a repository.

    Each subclass names the stage it was raised from so that a single top-level message is enough to tell what failed.
    """

    stage = "build"

    def __init__(self, message: str, package: Optional[str] = None) -> None:
        super().__init__(message)
        self.package = package

    def describe(self) -> str:
        """
        Returns the message prefixed with the failing stage and, when known, the package.
        """
        parts = [self.stage, self.package, str(self)]
        return ": ".join(part for part in parts if part)


class InputReadError(BuildError):
    stage = "read-input"


class InvalidPackageNameError(BuildError):
    stage = "package-name"


class ManifestReadError(BuildError):
    stage = "read-manifest"


class MalformedManifestError(BuildError):
    stage = "parse-manifest"


class ManifestValidationError(BuildError):
    stage = "validate-manifest"


class MissingAuthorsError(ManifestValidationError):
    def __init__(self, package: Optional[str] = None) -> None:
        super().__init__("missing authors", package=package)


class MissingMaintainersError(ManifestValidationError):
    def __init__(self, package: Optional[str] = None) -> None:
        super().__init__("missing maintainers", package=package)


class InvalidLicenseError(ManifestValidationError):
    def __init__(self, license: str, diagnostic: str, package: Optional[str] = None) -> None:
        super().__init__(f"invalid SPDX license expression {license!r}: {diagnostic}", package=package)
        self.license = license
        self.diagnostic = diagnostic


class SourceReadError(BuildError):
    stage = "read-source"


class SourcePathError(BuildError):
    stage = "source-path"


class TransformError(BuildError):
    stage = "transform"


class PackageEncodingError(BuildError):
    stage = "encode-package"


class PackageDecodingError(BuildError):
    stage = "decode-package"


class ArtifactWriteError(BuildError):
    stage = "write-package"


class OutputDirectoryError(BuildError):
    stage = "create-output"


class IndexReadError(BuildError):
    stage = "read-index"


class IndexCorruptError(BuildError):
    stage = "parse-index"


class IndexWriteError(BuildError):
    stage = "write-index"
