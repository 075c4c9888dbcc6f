import importlib
from typing import Annotated
from typing import Any

from typer import Argument
from typer import BadParameter
from typer import Exit
from typer import Option
from typer import Typer

from .config import LOG_LEVELS
from .config import load_config
from .fault import fault_handler
from .log import configure_logging
from .run import run as run_program
from .yieldable import classify as classify_yieldable

app = Typer()


def load_target(target: str, /) -> Any:
    """Import the object named by ``module:attribute``."""
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise BadParameter(f"Expected MODULE:ATTRIBUTE, got: {target}")

    obj: Any = importlib.import_module(module_name)
    for name in attribute.split("."):
        obj = getattr(obj, name)
    return obj


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        Option(help="Log level, overriding [tool.yieldio] log_level."),
    ] = None,
):
    """Drive generator programs from the command line."""
    if log_level is None:
        log_level = load_config().log_level
    elif log_level.upper() not in LOG_LEVELS:
        raise BadParameter(
            f"Expected one of {', '.join(LOG_LEVELS)}, got: {log_level}",
            param_hint="--log-level",
        )
    configure_logging(log_level)


@app.command()
def run(
    target: Annotated[
        str,
        Argument(
            help="The program to run. Example: 'yieldio.samples.parallel:total_size'",
            metavar="MODULE:ATTRIBUTE",
        ),
    ],
):
    """Run a program to completion on an event loop.

    Prints the program's result, or its error with exit status 1.
    """
    config = load_config()
    for module_name in config.register:
        importlib.import_module(module_name)

    program = load_target(target)
    try:
        with fault_handler(config.fault_handler()):
            result = run_program(program)
    except Exception as error:
        print(f"Error: {error!r}")
        raise Exit(1) from error
    print(repr(result))


@app.command()
def classify(
    target: Annotated[
        str,
        Argument(help="The object to classify.", metavar="MODULE:ATTRIBUTE"),
    ],
):
    """Show how an object would be resolved if a program yielded it."""
    print(type(classify_yieldable(load_target(target))).__name__)


if __name__ == "__main__":
    app()
