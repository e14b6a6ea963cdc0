import time
from argparse import ArgumentParser

from ccpm.transforms import get_transform

from .command import Command, existing_dir


class BuildCommand(Command):
    help = "Builds every package of an input directory into the repository pool of an output directory"

    def configure_parser(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "-m",
            "--minify",
            help="Minify Lua source files before packaging them",
            action="store_true",
        )
        parser.add_argument(
            "input",
            help="Directory containing the packages source directory",
            type=existing_dir,
        )
        parser.add_argument(
            "output",
            help="Directory which will contain the repository pool",
            type=existing_dir,
        )

    def execute(self, input: str, output: str, minify: bool = False) -> bool:
        step_name = "building packages"
        transform = get_transform("minify") if minify else None
        start = time.monotonic()

        def on_progress(p: float) -> None:
            self.output.write_step_progress(step_name, p)

        on_progress(0.0)
        try:
            built = self.builder.build_all(input, output, transform=transform, on_progress=on_progress)
        except Exception as exc:
            package = getattr(exc, "package", None)
            self.output.write_step_error(step_name, f"failed at {package}" if package else "failed")
            raise

        self.output.write_step_complete(step_name)
        self.output.write_table([[item.name, item.version, item.digest] for item in built])
        elapsed = round((time.monotonic() - start) * 1000)
        count = len(built)
        self.output.write_line(f"Built {count} package{'s' if count != 1 else ''} in {elapsed}ms")
        return True
