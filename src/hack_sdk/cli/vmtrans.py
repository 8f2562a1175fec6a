"""
vmtrans - IR Translator Command-Line Interface
==============================================

Translates stack-machine IR into Hack assembly.

Usage Examples
--------------
Single module (no bootstrap):
    $ vmtrans Main.vm              # writes Main.asm

Program directory (bootstrap calling Sys.init):
    $ vmtrans Pong/                # writes Pong/Pong.asm

Without IR comments:
    $ vmtrans Pong/ --no-comments
"""

import logging
from pathlib import Path
from typing import Optional

import click

from hack_sdk import __version__
from hack_sdk.cli.errors import handle_cli_exception, setup_logging
from hack_sdk.translator import TranslatorOptions, VMTranslator

logger = logging.getLogger(__name__)


def resolve_output_path(output: Optional[Path], input_path: Path) -> Path:
    """
    Determine the assembly file path.

    Examples:
        Main.vm  → Main.asm
        Pong/    → Pong/Pong.asm
    """
    if output is not None:
        return output
    if input_path.is_dir():
        return input_path / f"{input_path.resolve().name}.asm"
    return input_path.with_suffix(".asm")


@click.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: input.asm or DIR/DIR.asm)",
)
@click.option(
    "--bootstrap/--no-bootstrap",
    default=None,
    help="Emit SP setup and call Sys.init (default: on for directories)",
)
@click.option(
    "--comments/--no-comments",
    default=True,
    help="Echo each IR instruction as an assembly comment",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="vmtrans")
def main(
    input_path: Path,
    output: Optional[Path],
    bootstrap: Optional[bool],
    comments: bool,
    verbose: bool,
) -> None:
    """
    Translate stack-machine IR to Hack assembly.

    INPUT_PATH is a .vm file or a directory of .vm files. A directory is
    translated into one assembly program, modules in name order.

    \b
    Examples:
        vmtrans Main.vm              # Outputs Main.asm
        vmtrans Pong/                # Outputs Pong/Pong.asm
        vmtrans Main.vm --bootstrap  # Force the bootstrap
    """
    setup_logging(verbose)

    try:
        is_directory = input_path.is_dir()
        if bootstrap is None:
            bootstrap = is_directory

        translator = VMTranslator(TranslatorOptions(comments=comments))
        if is_directory:
            assembly = translator.translate_directory(input_path, bootstrap=bootstrap)
        else:
            if input_path.suffix != ".vm":
                raise click.BadParameter(f"expected a .vm file, got {input_path.name}")
            assembly = translator.translate_file(input_path, bootstrap=bootstrap)

        target = resolve_output_path(output, input_path)
        target.write_text(assembly)

        logger.debug("%s: %d lines", target, assembly.count("\n"))
        click.echo(f"Translated {input_path} -> {target}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
