"""
jackc - Jack Compiler Command-Line Interface
============================================

Compiles Jack classes to stack-machine IR.

Usage Examples
--------------
Single class:
    $ jackc Main.jack             # writes Main.vm

Whole program directory:
    $ jackc Pong/                 # writes Pong/<Class>.vm for each class

Separate output directory:
    $ jackc Pong/ -o build/

Full pipeline:
    $ jackc Pong/ && vmtrans Pong/
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from hack_sdk import __version__
from hack_sdk.cli.errors import ExitCode, handle_cli_exception, setup_logging
from hack_sdk.jack import JackCompiler, JackError

logger = logging.getLogger(__name__)


def discover_sources(input_path: Path) -> list[Path]:
    """
    List the compilation units named by INPUT_PATH.

    A file is its own single unit; a directory contributes every .jack
    file directly inside it, sorted by name.
    """
    if input_path.is_dir():
        sources = sorted(input_path.glob("*.jack"))
        if not sources:
            raise click.BadParameter(f"no .jack files in {input_path}")
        return sources

    if input_path.suffix != ".jack":
        raise click.BadParameter(f"expected a .jack file, got {input_path.name}")
    return [input_path]


@click.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-o", "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for .vm files (default: beside each source)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="jackc")
def main(input_path: Path, output_dir: Optional[Path], verbose: bool) -> None:
    """
    Compile Jack source code to stack-machine IR.

    INPUT_PATH is a .jack file or a directory of .jack files. Each class
    is compiled independently to a .vm file of the same name.

    \b
    Examples:
        jackc Main.jack              # Outputs Main.vm
        jackc Pong/                  # One .vm per class
        jackc Pong/ -o build/        # Write into build/
    """
    setup_logging(verbose)

    try:
        sources = discover_sources(input_path)
        compiler = JackCompiler()

        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)

        failures = 0
        for source in sources:
            try:
                result = compiler.compile_file(source)
            except JackError as e:
                # Report and move on to the next unit
                click.echo(str(e), err=True)
                failures += 1
                continue

            target = (output_dir or source.parent) / f"{source.stem}.vm"
            target.write_text(result.vm_text)
            logger.debug("%s: %d instructions", target, len(result.instructions))
            click.echo(f"Compiled {source} -> {target}")

        if failures:
            click.echo(f"{failures} of {len(sources)} unit(s) failed to compile", err=True)
            sys.exit(ExitCode.BUILD_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
