"""Stylesheet CLI commands: check, get, eval and functions."""

from pathlib import Path

import click

from stylekit.accessors import RuleAccessor
from stylekit.config import StylekitConfig
from stylekit.diagnostics import DiagnosticSink, Severity
from stylekit.environment import Idiom, Orientation, SizeClass, StaticEnvironment
from stylekit.errors import StylesheetError
from stylekit.expressions import FUNCTIONS, compile_expression
from stylekit.loader import StylesheetLoader

_ACCESSORS = ["integer", "float", "boolean", "string", "font", "color"]


def _enum_choice(enum) -> click.Choice:
    return click.Choice([member.name for member in enum])


def environment_options(fn):
    """Add --idiom/--orientation/--vertical/--horizontal overrides."""
    options = [
        click.option("--idiom", type=_enum_choice(Idiom), default=None, help="Device idiom."),
        click.option(
            "--orientation", type=_enum_choice(Orientation), default=None, help="Orientation."
        ),
        click.option(
            "--vertical", type=_enum_choice(SizeClass), default=None,
            help="Vertical size class.",
        ),
        click.option(
            "--horizontal", type=_enum_choice(SizeClass), default=None,
            help="Horizontal size class.",
        ),
        click.option(
            "--var", "variables", multiple=True, metavar="NAME=VALUE",
            help="Extra expression variable (repeatable).",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _build_environment(
    config: StylekitConfig,
    idiom: str | None,
    orientation: str | None,
    vertical: str | None,
    horizontal: str | None,
    variables: tuple[str, ...],
) -> StaticEnvironment:
    values: dict[str, float] = {}
    for item in variables:
        name, sep, raw = item.partition("=")
        try:
            if not sep or not name:
                raise ValueError
            values[name.strip()] = float(raw)
        except ValueError:
            raise click.BadParameter(f"expected NAME=NUMBER, got {item!r}", param_hint="--var")

    environment = config.environment(**values)
    changes = {}
    if idiom:
        changes["current_idiom"] = Idiom[idiom]
    if orientation:
        changes["current_orientation"] = Orientation[orientation]
    if vertical:
        changes["vertical"] = SizeClass[vertical]
    if horizontal:
        changes["horizontal"] = SizeClass[horizontal]
    return environment.replace(**changes) if changes else environment


def _echo_diagnostics(sink: DiagnosticSink) -> None:
    for diagnostic in sink:
        colour = "yellow" if diagnostic.severity != Severity.INFO else "cyan"
        click.echo(click.style(str(diagnostic), fg=colour), err=True)


def _load(path: Path, environment: StaticEnvironment, sink: DiagnosticSink):
    try:
        return StylesheetLoader(environment, sink).load_path(path)
    except StylesheetError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@environment_options
@click.pass_obj
def check(config: StylekitConfig, path: Path, idiom, orientation, vertical, horizontal, variables):
    """Load a stylesheet and list its styles."""
    environment = _build_environment(config, idiom, orientation, vertical, horizontal, variables)
    sink = DiagnosticSink()
    sheet = _load(path, environment, sink)

    for style in sheet:
        rules = sheet.style(style)
        click.echo(f"{style} ({len(rules)} rules)")
        for name, rule in rules.items():
            suffix = ", conditional" if rule.is_conditional else ""
            click.echo(f"  {name}: {rule.kind.value}{suffix}")

    _echo_diagnostics(sink)
    click.echo(click.style(f"{len(sheet)} style(s) loaded from {path}", fg="green"))


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("style")
@click.argument("rule")
@click.option(
    "--as", "as_type", type=click.Choice(_ACCESSORS), default=None,
    help="Accessor to read the rule with (defaults to the rule's own kind).",
)
@environment_options
@click.pass_obj
def get(
    config: StylekitConfig,
    path: Path,
    style: str,
    rule: str,
    as_type: str | None,
    idiom,
    orientation,
    vertical,
    horizontal,
    variables,
):
    """Resolve a single rule and print its value."""
    environment = _build_environment(config, idiom, orientation, vertical, horizontal, variables)
    sink = DiagnosticSink()
    sheet = _load(path, environment, sink)

    found = sheet.rule(style, rule)
    if found is None:
        click.echo(click.style(f"Error: no rule '{rule}' in style '{style}'", fg="red"), err=True)
        raise SystemExit(1)

    accessor = RuleAccessor(environment, sink)
    if as_type is None:
        value = accessor.resolve(found)
    else:
        value = getattr(accessor, as_type)(found)

    click.echo(str(value))
    _echo_diagnostics(sink)


@click.command("eval")
@click.argument("expression")
@environment_options
@click.pass_obj
def eval_expression(
    config: StylekitConfig, expression: str, idiom, orientation, vertical, horizontal, variables
):
    """Evaluate an expression (without the ${} delimiters)."""
    environment = _build_environment(config, idiom, orientation, vertical, horizontal, variables)
    sink = DiagnosticSink()

    value = compile_expression(expression).evaluate(environment, sink)

    click.echo(f"{value:g}")
    _echo_diagnostics(sink)
    if len(sink):
        raise SystemExit(1)


@click.command("functions")
def list_functions():
    """List the functions available to expressions."""
    for definition in FUNCTIONS.values():
        if definition.max_args is None:
            arity = f"{definition.min_args}+ args"
        elif definition.max_args == definition.min_args:
            arity = f"{definition.min_args} args"
        else:
            arity = f"{definition.min_args}-{definition.max_args} args"
        click.echo(f"{definition.name} ({arity}): {definition.description}")
        for example in definition.examples:
            click.echo(f"    {example}")
