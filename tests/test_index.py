import json
import os

import pytest

from ccpm.errors import IndexCorruptError
from ccpm.models.index import Index, IndexPackage, IndexVersion, merge_one
from ccpm.models.manifest import PackageManifest
from conftest import manifest_data


def _manifest(**overrides: object) -> PackageManifest:
    return PackageManifest(**manifest_data(**overrides))


def _index_with(name: str, *versions: str) -> Index:
    index = Index()
    for version in versions:
        index = merge_one(
            index,
            name=name,
            manifest=_manifest(version=version),
            version=version,
            index_version=IndexVersion(digest=f"digest-{version}", dependencies=[]),
        )
    return index


def test_merge_inserts_new_package() -> None:
    index = merge_one(
        Index(),
        name="widget",
        manifest=_manifest(),
        version="1.0",
        index_version=IndexVersion(digest="abc", dependencies=["dep"]),
    )
    assert index.model_dump() == {
        "widget": {
            "description": "d",
            "license": "MIT",
            "authors": ["a"],
            "maintainers": ["m"],
            "versions": {"1.0": {"digest": "abc", "dependencies": ["dep"]}},
            "latest_version": "1.0",
        }
    }


def test_merge_keeps_existing_versions() -> None:
    index = _index_with("widget", "1.0", "2.0")
    assert set(index["widget"].versions) == {"1.0", "2.0"}
    assert index["widget"].latest_version == "2.0"
    assert index["widget"].versions["1.0"].digest == "digest-1.0", "older versions should be untouched"


def test_merge_latest_version_is_last_built_not_highest() -> None:
    index = _index_with("widget", "2.0", "1.0")
    assert index["widget"].latest_version == "1.0"


def test_merge_overwrites_rebuilt_version_and_manifest() -> None:
    index = _index_with("widget", "1.0", "2.0")
    index = merge_one(
        index,
        name="widget",
        manifest=_manifest(description="new", authors=["b", "c"]),
        version="1.0",
        index_version=IndexVersion(digest="rebuilt", dependencies=["x"]),
    )
    package = index["widget"]
    assert package.description == "new"
    assert package.authors == ["b", "c"]
    assert package.versions["1.0"] == IndexVersion(digest="rebuilt", dependencies=["x"])
    assert package.versions["2.0"].digest == "digest-2.0"
    assert package.latest_version == "1.0"


def test_merge_does_not_mutate_input() -> None:
    original = _index_with("widget", "1.0")
    snapshot = original.deepcopy()
    merge_one(
        original,
        name="widget",
        manifest=_manifest(description="changed"),
        version="2.0",
        index_version=IndexVersion(digest="x", dependencies=[]),
    )
    merge_one(
        original,
        name="other",
        manifest=_manifest(),
        version="1.0",
        index_version=IndexVersion(digest="y", dependencies=[]),
    )
    assert original == snapshot


def test_merge_keeps_other_packages() -> None:
    index = _index_with("widget", "1.0")
    index = merge_one(
        index,
        name="gadget",
        manifest=_manifest(),
        version="3.0",
        index_version=IndexVersion(digest="z", dependencies=[]),
    )
    assert [name for name, _ in index.items()] == ["widget", "gadget"]


def test_from_path_missing_file_is_empty(mock_path: str) -> None:
    index = Index.from_path(os.path.join(mock_path, "nothing", "index.json"))
    assert len(index) == 0


@pytest.mark.parametrize(
    "content",
    ["not json", "[]", '{"widget": {"description": "d"}}'],
    ids=["not json", "not an object", "missing fields"],
)
def test_from_path_rejects_corrupt_index(mock_path: str, content: str) -> None:
    path = os.path.join(mock_path, "index.json")
    with open(path, "w") as fp:
        fp.write(content)
    with pytest.raises(IndexCorruptError):
        Index.from_path(path)


def test_write_json_round_trips(mock_path: str) -> None:
    path = os.path.join(mock_path, "pool", "index.json")
    os.makedirs(os.path.dirname(path))
    index = _index_with("widget", "1.0", "2.0")
    index.write_json(path)

    assert Index.from_path(path) == index
    assert os.listdir(os.path.dirname(path)) == ["index.json"], "no temporary files should be left behind"


def test_write_json_flattens_package_metadata(mock_path: str) -> None:
    path = os.path.join(mock_path, "index.json")
    _index_with("widget", "1.0").write_json(path, indent=None)
    with open(path) as fp:
        raw = json.load(fp)
    assert set(raw["widget"]) == {
        "description",
        "license",
        "authors",
        "maintainers",
        "versions",
        "latest_version",
    }


def test_index_package_is_a_package_base() -> None:
    package = IndexPackage(**manifest_data(), versions={}, latest_version="1.0")
    assert package.base().license == "MIT"
