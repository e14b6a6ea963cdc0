import json
import os
import shutil
from sys import stderr
from typing import Any, Callable, Dict, Generator, Optional
from uuid import uuid4

import pytest
from loguru import logger

from ccpm import Builder

# Set up logger with all logs because pytest itself suppresses output
logger.remove()
logger.add(stderr, level="TRACE")

MakePackage = Callable[..., str]


def manifest_data(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "description": "d",
        "license": "MIT",
        "authors": ["a"],
        "maintainers": ["m"],
        "version": "1.0",
        "dependencies": [],
    }
    data.update(overrides)
    return data


@pytest.fixture(scope="function")
def mock_path() -> Generator[str, None, None]:
    """ Copies and returns mock folder structure from fixtures. """
    mock_path = os.path.join("tests_tmp", str(uuid4()))
    root_path = os.path.join(os.path.dirname(__file__), "fixtures", "files")
    shutil.copytree(root_path, mock_path)
    logger.debug(f"generated {mock_path=}")
    yield mock_path
    logger.debug(f"cleaning up {mock_path=}")
    shutil.rmtree(mock_path)


@pytest.fixture(scope="function")
def output_path(mock_path: str) -> str:
    """ Returns an existing, empty output directory. """
    path = os.path.join(mock_path, "output")
    os.makedirs(path)
    return path


@pytest.fixture(scope="function")
def builder() -> Builder:
    return Builder()


@pytest.fixture(scope="function")
def make_package(mock_path: str) -> MakePackage:
    """ Returns a function which writes a package directory into the mock input tree. """

    def _make_package(
        name: str,
        files: Optional[Dict[str, str]] = None,
        **manifest: Any,
    ) -> str:
        package_dir = os.path.join(mock_path, "packages", name)
        source_dir = os.path.join(package_dir, "source")
        if os.path.exists(package_dir):
            shutil.rmtree(package_dir)
        os.makedirs(source_dir)
        with open(os.path.join(package_dir, "manifest.json"), "w") as fp:
            json.dump(manifest_data(**manifest), fp)
        for path, content in (files or {}).items():
            file_path = os.path.join(source_dir, *path.split("/"))
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "w", encoding="utf-8", newline="") as fp:
                fp.write(content)
        return package_dir

    return _make_package


def set_version(package_dir: str, version: str) -> None:
    path = os.path.join(package_dir, "manifest.json")
    with open(path) as fp:
        data = json.load(fp)
    data["version"] = version
    with open(path, "w") as fp:
        json.dump(data, fp)
