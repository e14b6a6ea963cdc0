import os
from enum import Enum
from sys import stderr
from typing import Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BuildLayout(BaseModel):
    """
    Names of the files and directories that make up a repository's input and output trees.
    """

    packages_dir: str = Field("packages", description="Directory under the input root holding one directory per package.")
    manifest_file: str = Field("manifest.json", description="Manifest file name inside each package directory.")
    source_dir: str = Field("source", description="Source tree directory inside each package directory.")
    pool_dir: str = Field("pool", description="Directory under the output root receiving artifacts and the index.")
    index_file: str = Field("index.json", description="Index file name inside the pool directory.")
    archive_extension: str = Field("ccp", description="File extension of built artifacts.")

    def packages_path(self, input_dir: str) -> str:
        return os.path.join(input_dir, self.packages_dir)

    def pool_path(self, output_dir: str) -> str:
        return os.path.join(output_dir, self.pool_dir)

    def index_path(self, output_dir: str) -> str:
        return os.path.join(self.pool_path(output_dir), self.index_file)

    def artifact_name(self, name: str, version: str) -> str:
        return f"{name}.{version}.{self.archive_extension}"

    def artifact_path(self, output_dir: str, name: str, version: str) -> str:
        return os.path.join(self.pool_path(output_dir), self.artifact_name(name, version))


class Config(BaseModel):
    layout: BuildLayout = BuildLayout()
    compression_level: int = Field(6, ge=0, le=9)
    index_indent: Optional[int] = 2
    log_level: LogLevel = Field(default_factory=lambda: LogLevel(os.environ.get("CCPM_LOGGING", "CRITICAL")))

    def configure_logger(self) -> None:
        # Set up logger
        logger.remove()
        logger.add(stderr, level=self.log_level.value)


def get_config_path() -> str:
    return os.environ.get("CCPM_CONFIG_FILE", "ccpm.yml")


def read_config(path: Optional[str] = None) -> Config:
    if path is None:
        path = get_config_path()
    try:
        with open(path) as fp:
            raw = yaml.load(fp, Loader=yaml.SafeLoader)
            if raw is None:
                return Config()
            cfg = Config(**raw)
            return cfg
    except FileNotFoundError:
        return Config()
