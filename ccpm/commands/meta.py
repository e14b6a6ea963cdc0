from argparse import ArgumentParser
from typing import Iterable, List, Optional, Tuple

from ccpm.models.index import IndexPackage

from .command import Command, ListCommand, existing_dir


class PackageListCommand(ListCommand):
    help = "Lists the packages recorded in a repository's index"

    def configure_parser(self, parser: ArgumentParser) -> None:
        super().configure_parser(parser)
        parser.add_argument("output", help="Directory containing the repository pool", type=existing_dir)

    def get_iterable(self, output: str) -> Iterable[Tuple[str, IndexPackage]]:
        return self.builder.packages(output)

    def write_iterable(self, iterable: Iterable[Tuple[str, IndexPackage]], output: str) -> None:
        self.output.write_table(
            [[name, package.latest_version, package.license, package.description] for name, package in iterable]
        )


class VersionListCommand(Command):
    help = "Lists the versions recorded for a package"

    def configure_parser(self, parser: ArgumentParser) -> None:
        parser.add_argument("output", help="Directory containing the repository pool", type=existing_dir)
        parser.add_argument("package", help="The package to list versions for")

    def execute(self, output: str, package: str) -> bool:
        for version in self.builder.versions(output, package):
            self.output.write(version)
        return True


class ValidateCommand(Command):
    help = "Validates built artifacts against the digests recorded in the index"

    def configure_parser(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--deep",
            help="Also decode each artifact and check the digest of every file inside it",
            action="store_true",
        )
        parser.add_argument("output", help="Directory containing the repository pool", type=existing_dir)
        parser.add_argument(
            "packages",
            help="Names of the package or packages to validate; if none specified, all packages will be validated",
            nargs="*",
        )

    def execute(self, output: str, packages: Optional[List[str]] = None, deep: bool = False) -> bool:
        invalid_files = list(self.builder.validate(output, packages=packages, deep=deep))
        invalid_count = len(invalid_files)
        if invalid_count == 1:
            self.output.write("1 invalid artifact")
        else:
            self.output.write(f"{invalid_count} invalid artifacts")
        for file in invalid_files:
            self.output.write(file)
        return invalid_count == 0
