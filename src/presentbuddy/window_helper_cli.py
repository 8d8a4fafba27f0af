"""presentbuddy-window-helper: standalone window helper process.

Exit code 0 on success, 1 on failure. Prints ``<Verb> <acted>/<total> windows``
for humans, or the OperationResult as JSON with ``--json``.
"""

from __future__ import annotations

import json

import typer

from .core.errors import HelperMissing
from .core.models import OperationResult
from .platform_factory import build_window_helper

app = typer.Typer(help="PresentBuddy window helper", add_completion=False)


def _helper():
    helper = build_window_helper()
    if helper is None:
        raise HelperMissing("No window backend available on this system")
    return helper


def _report(ctx: typer.Context, result: OperationResult, verb: str, noun: str = "windows") -> None:
    if ctx.obj.get("json"):
        typer.echo(json.dumps(result.to_dict()))
    elif result.success:
        if result.counts is not None:
            typer.echo(f"{verb} {result.counts} {noun}")
        elif result.value is not None:
            typer.echo(str(result.value))
    else:
        code = result.error_code.value if result.error_code else "Error"
        typer.echo(f"{code}: {result.error}", err=True)
    raise typer.Exit(0 if result.success else 1)


def _run(operation: str, *args) -> OperationResult:
    try:
        helper = _helper()
    except HelperMissing as e:
        return OperationResult.from_error(e)
    return getattr(helper, operation)(*args)


@app.callback()
def options(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    ctx.obj = {"json": json_output}


@app.command("minimize-all")
def minimize_all_cmd(ctx: typer.Context) -> None:
    """Minimize all windows across all apps."""
    _report(ctx, _run("minimize_all"), "Minimized")


@app.command("minimize-all-except")
def minimize_all_except_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Application to leave alone"),
) -> None:
    """Minimize all windows except those of the named app."""
    _report(ctx, _run("minimize_all_except", name), "Minimized")


@app.command("restore-all")
def restore_all_cmd(ctx: typer.Context) -> None:
    """Restore all minimized windows across all apps."""
    _report(ctx, _run("restore_all"), "Restored")


@app.command("hide-all")
def hide_all_cmd(ctx: typer.Context) -> None:
    """Hide all applications."""
    _report(ctx, _run("hide_all"), "Hid", "applications")


@app.command("minimize-app")
def minimize_app_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Application name"),
) -> None:
    """Minimize the windows of one app."""
    _report(ctx, _run("minimize_app", name), "Minimized")


@app.command("request-permission")
def request_permission_cmd(ctx: typer.Context) -> None:
    """Trigger the accessibility consent prompt and return immediately."""
    _report(ctx, _run("request_permission"), "Requested")


@app.command("check-permission")
def check_permission_cmd(ctx: typer.Context) -> None:
    """Report whether the accessibility permission is granted."""
    try:
        granted = _helper().check_permission()
    except HelperMissing as e:
        _report(ctx, OperationResult.from_error(e), "Checked")
        return
    result = OperationResult(success=granted, value="granted" if granted else "denied")
    if ctx.obj.get("json"):
        typer.echo(json.dumps(result.to_dict()))
    else:
        typer.echo(result.value)
    raise typer.Exit(0 if granted else 1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
