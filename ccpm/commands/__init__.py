# flake8: noqa
from .build import BuildCommand
from .command import Command
from .meta import PackageListCommand, ValidateCommand, VersionListCommand
