import os
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, RootModel, ValidationError

from ccpm.errors import IndexCorruptError, IndexReadError, IndexWriteError
from ccpm.models.manifest import PackageBase
from ccpm.utils.files import write_text_atomic


class IndexVersion(BaseModel):
    digest: str
    dependencies: List[str] = []


class IndexPackage(PackageBase):
    """
    Everything the index knows about one package: the latest manifest metadata and every version built so far.
    """

    versions: Dict[str, IndexVersion] = {}
    latest_version: str


class Index(RootModel[Dict[str, IndexPackage]]):
    """
    The repository index, keyed by package directory name.
    """

    root: Dict[str, IndexPackage] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.root

    def __getitem__(self, name: str) -> IndexPackage:
        return self.root[name]

    def __len__(self) -> int:
        return len(self.root)

    def items(self) -> Iterator[Tuple[str, IndexPackage]]:
        yield from self.root.items()

    def deepcopy(self) -> "Index":
        return self.model_copy(deep=True)

    @staticmethod
    def from_path(path: str) -> "Index":
        """
        Loads the index stored at the given path. If there is no file at the path, returns an empty Index.

        :raises IndexReadError: If the file exists but cannot be read.
        :raises IndexCorruptError: If the file exists but is not a valid index.
        """
        if not os.path.isfile(path):
            logger.info(f"no index at {path}, creating a new one")
            return Index()

        logger.info(f"updating index at {path}")
        try:
            with open(path, "rb") as fp:
                raw = fp.read()
        except OSError as exc:
            raise IndexReadError(f"unable to read index: {exc}") from exc
        try:
            return Index.model_validate_json(raw)
        except ValidationError as exc:
            raise IndexCorruptError(f"malformed index: {exc}") from exc

    def write_json(self, path: str, indent: Optional[int] = 2) -> None:
        """
        Replaces the file at the given path with this index.

        :raises IndexWriteError: If the index cannot be serialized or written.
        """
        try:
            text = self.model_dump_json(indent=indent)
        except ValueError as exc:
            raise IndexWriteError(f"unable to serialize index: {exc}") from exc
        try:
            write_text_atomic(path, text)
        except OSError as exc:
            raise IndexWriteError(f"unable to write index: {exc}") from exc


def merge_one(
    index: Index,
    name: str,
    manifest: PackageBase,
    version: str,
    index_version: IndexVersion,
) -> Index:
    """
    Returns a copy of the index with one freshly built package version recorded.

    The package's metadata is replaced by the given manifest and its latest version becomes the given version,
    regardless of any ordering between version strings. Other versions already recorded for the package are kept.
    """
    packages = dict(index.root)
    existing = packages.get(name)
    versions = dict(existing.versions) if existing is not None else {}
    versions[version] = index_version.model_copy(deep=True)
    packages[name] = IndexPackage(
        **manifest.base().model_dump(),
        versions=versions,
        latest_version=version,
    )
    return Index(packages)
