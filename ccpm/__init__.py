# flake8: noqa
from ccpm.archive import decode_package, encode_package
from ccpm.builder import Builder, BuiltPackage
from ccpm.config import BuildLayout, Config, read_config
from ccpm.models.index import Index, IndexPackage, IndexVersion, merge_one
from ccpm.models.manifest import PackageBase, PackageManifest
from ccpm.models.package import Package, SourceFile
from ccpm.models.transform import BaseTransform
