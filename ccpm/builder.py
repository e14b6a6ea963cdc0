import os
from typing import Iterable, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from ccpm.archive import DEFAULT_COMPRESSION_LEVEL, decode_package, encode_package
from ccpm.collector import collect_sources
from ccpm.config import BuildLayout
from ccpm.errors import (ArtifactWriteError, BuildError, InputReadError,
                         InvalidPackageNameError, ManifestReadError,
                         OutputDirectoryError, PackageDecodingError)
from ccpm.models.index import Index, IndexPackage, IndexVersion, merge_one
from ccpm.models.manifest import PackageManifest
from ccpm.models.package import Package
from ccpm.models.transform import BaseTransform
from ccpm.utils.digest import digest_file, digest_text
from ccpm.utils.files import ensure_dir_exists, read_text, write_text
from ccpm.utils.progress import ProgressCallback, StepProgress, progress_noop


class BuiltPackage(BaseModel):
    name: str
    version: str
    artifact: str
    digest: str


class Builder:
    def __init__(
        self,
        layout: BuildLayout = BuildLayout(),
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
        index_indent: Optional[int] = 2,
    ) -> None:
        self.layout = layout
        self.compression_level = compression_level
        self.index_indent = index_indent

    def index_path(self, output_dir: str) -> str:
        return self.layout.index_path(output_dir)

    def load_index(self, output_dir: str) -> Index:
        return Index.from_path(self.index_path(output_dir))

    def package_dirs(self, input_dir: str) -> List[str]:
        """
        Returns the package directories found under the input's packages directory, in name order.

        :raises InputReadError: If the packages directory cannot be listed.
        """
        packages_dir = self.layout.packages_path(input_dir)
        try:
            with os.scandir(packages_dir) as entries:
                return sorted(entry.path for entry in entries if entry.is_dir())
        except OSError as exc:
            raise InputReadError(f"unable to read input directory: {exc}") from exc

    def read_manifest(self, package_dir: str) -> PackageManifest:
        """
        Reads, parses and verifies the manifest of a package directory.
        """
        path = os.path.join(package_dir, self.layout.manifest_file)
        try:
            with open(path, "rb") as fp:
                raw = fp.read()
        except OSError as exc:
            raise ManifestReadError(f"unable to read package manifest: {exc}") from exc
        manifest = PackageManifest.from_json(raw)
        manifest.verify()
        return manifest

    def build_package(
        self,
        index: Index,
        package_dir: str,
        output_dir: str,
        transform: Optional[BaseTransform] = None,
    ) -> Tuple[Index, BuiltPackage]:
        """
        Builds a single package directory into an artifact in the pool.

        The given index is not modified; a new index recording the built version is returned alongside the result.

        :raises BuildError: If any step fails; the error's package attribute names the package directory.
        """
        name = os.path.basename(os.path.normpath(package_dir))
        try:
            name.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidPackageNameError(f"invalid package name: {package_dir!r}") from exc

        context = name
        try:
            logger.info(f"{context} - reading manifest...")
            manifest = self.read_manifest(package_dir)
            logger.debug(
                f"{context} - version {manifest.version}, license {manifest.license}, "
                f"dependencies {manifest.dependencies}"
            )

            logger.info(f"{context} - collecting sources...")
            source_root = os.path.join(package_dir, self.layout.source_dir)
            files = collect_sources(source_root, transform=transform)
            package = Package(**manifest.model_dump(), files=files)

            artifact_path = self.layout.artifact_path(output_dir, name, manifest.version)
            logger.info(f"{context} - encoding {len(files)} files...")
            data = encode_package(package, compression_level=self.compression_level)
            try:
                write_text(artifact_path, data)
            except OSError as exc:
                raise ArtifactWriteError(f"unable to write package: {exc}") from exc
        except BuildError as exc:
            if exc.package is None:
                exc.package = name
            raise

        digest = digest_text(data)
        index = merge_one(
            index,
            name=name,
            manifest=manifest,
            version=manifest.version,
            index_version=IndexVersion(digest=digest, dependencies=list(manifest.dependencies)),
        )
        logger.success(f"{context} - built {os.path.basename(artifact_path)}")
        return index, BuiltPackage(name=name, version=manifest.version, artifact=artifact_path, digest=digest)

    def build_all(
        self,
        input_dir: str,
        output_dir: str,
        transform: Optional[BaseTransform] = None,
        on_progress: ProgressCallback = progress_noop,
    ) -> List[BuiltPackage]:
        """
        Builds every package directory of the input into the output's pool and updates the pool's index.

        Packages are built one at a time and the first failure aborts the run. The index is only written once every
        package has built, so a failed run leaves it untouched; artifacts already written by the failed run are kept.
        """
        pool_dir = self.layout.pool_path(output_dir)
        try:
            ensure_dir_exists(pool_dir)
        except OSError as exc:
            raise OutputDirectoryError(f"unable to create output directory: {exc}") from exc

        index = self.load_index(output_dir)
        package_dirs = self.package_dirs(input_dir)
        logger.info(f"building {len(package_dirs)} packages")

        on_step_progress = StepProgress.from_step_count(step_count=len(package_dirs), on_progress=on_progress)
        on_progress(0.0)

        built: List[BuiltPackage] = []
        for package_dir in package_dirs:
            index, result = self.build_package(index, package_dir, output_dir, transform=transform)
            built.append(result)
            on_step_progress.advance()

        index.write_json(self.index_path(output_dir), indent=self.index_indent)
        on_progress(1.0)
        logger.success(f"built {len(built)} packages")
        return built

    def validate(
        self, output_dir: str, packages: Optional[Iterable[str]] = None, deep: bool = False
    ) -> Iterable[str]:
        """
        Checks the pool's artifacts against the index, returning an iterable of each invalid artifact path.

        With deep, artifacts are also decoded and their files checked against their recorded digests; a bad file is
        reported as `<artifact path>:<file path>`.

        :raises KeyError: If a named package is not in the index.
        """
        index = self.load_index(output_dir)
        names = list(packages) if packages else [name for name, _ in index.items()]
        for name in names:
            package = index[name]
            for version, info in package.versions.items():
                path = self.layout.artifact_path(output_dir, name, version)
                if not os.path.isfile(path):
                    logger.warning(f"missing artifact: {path}")
                    yield path
                    continue
                if digest_file(path) != info.digest:
                    logger.warning(f"checksum mismatch: {path}")
                    yield path
                    continue
                if deep:
                    yield from self._validate_content(path, version)

    def _validate_content(self, path: str, version: str) -> Iterable[str]:
        try:
            package = decode_package(read_text(path))
        except PackageDecodingError as exc:
            logger.warning(f"undecodable artifact {path}: {exc}")
            yield path
            return
        if package.version != version:
            logger.warning(f"version mismatch: {path} contains {package.version}")
            yield path
            return
        for file, source in package.files.items():
            if not source.is_intact():
                logger.warning(f"checksum mismatch: {path}:{file}")
                yield f"{path}:{file}"

    def packages(self, output_dir: str) -> Iterable[Tuple[str, IndexPackage]]:
        """
        Returns an iterable of 2-tuples containing the name and index entry of every package in the pool.
        """
        yield from self.load_index(output_dir).items()

    def versions(self, output_dir: str, name: str) -> Iterable[str]:
        """
        Returns an iterable of all versions recorded for the given package.

        :raises LookupError: If the package is not in the index.
        """
        index = self.load_index(output_dir)
        if name not in index:
            raise LookupError(f"no such package: {name}")
        yield from index[name].versions.keys()
