"""Typer CLI application: one command per operation plus batch ``run``."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Optional

import typer

import sheetman
from sheetman.config import Settings
from sheetman.contracts.common import Target
from sheetman.contracts.params import ItemParams
from sheetman.contracts.results import ItemResult
from sheetman.engine.dispatcher import (
    error_envelope,
    exit_code_for,
    item_envelope,
    print_response,
    success_envelope,
)
from sheetman.io.fileops import read_text_safe
from sheetman.observe.events import Timer

_MAIN_HELP = """\
View, create, edit and delete rows in .xlsx workbooks.

**Commands:** `read` (raw file), `view` (sheet as records), `create` (write or append
records), `edit` (update matching rows), `delete` (remove the file), `run` (batch file).

Relative `--file` paths resolve under the base directory (`/data/sheet-manager`
unless configured); no `--file` means `/tmp/data.xlsx`.

**Every command** returns a JSON `ResponseEnvelope`:
`{"ok": bool, "command": "...", "result": {...}, "errors": [...], "warnings": [...], "metrics": {"duration_ms": N}}`

**Exit codes:** 0=success, 1=soft outcome (nothing to read/delete, no row matched),
10=validation, 50=io, 90=internal
"""

_RUN_EPILOG = """\
**Example batch file:**

    name: nightly
    defaults: { continue_on_fail: false }
    items:
      - { operation: create, filePath: people.xlsx, sheetName: People, data: [{Name: Ana, Age: 30}] }
      - { operation: edit, filePath: people.xlsx, sheetName: People, conditionColumn: Name, conditionValue: Ana, targetColumn: Age, newValue: 31 }
"""


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(sheetman.__version__)
        raise typer.Exit()


app = typer.Typer(
    name="sheetman",
    help=_MAIN_HELP,
    no_args_is_help=True,
    rich_markup_mode="markdown",
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool, typer.Option("--version", "-V", help="Print version and exit.", is_eager=True)
    ] = False,
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Path to a sheetman.yaml settings file")] = None,
    base_dir: Annotated[Optional[str], typer.Option("--base-dir", help="Directory relative --file paths resolve under")] = None,
    events: Annotated[bool, typer.Option("--events", help="Emit NDJSON lifecycle events to stderr")] = False,
) -> None:
    if version:
        _version_callback(True)
    try:
        settings = Settings.load(config) if config else Settings.load_from_dir(Path.cwd())
    except Exception as e:
        _emit(error_envelope("config", "ERR_INVALID_CONFIG", f"Cannot load settings: {e}"))
        return
    overrides: dict[str, Any] = {}
    if base_dir:
        overrides["base_dir"] = base_dir
    if events:
        overrides["events"] = True
    ctx.obj = settings.model_copy(update=overrides)


# Type aliases for common options
FilePath = Annotated[str, typer.Option("--file", "-f", help="Workbook path (.xlsx); relative paths resolve under the base directory")]
SheetOpt = Annotated[str, typer.Option("--sheet", "-s", help="Sheet name")]
HeaderModeOpt = Annotated[Optional[str], typer.Option("--header-mode", help="'legacy' (blank header cells dropped) or 'strict' (blank cells keep their position)")]
DryRunOpt = Annotated[bool, typer.Option("--dry-run", help="Compute the result without writing to disk")]
OutOpt = Annotated[Optional[str], typer.Option("--out", "-o", help="Write the workbook bytes to this path instead of embedding base64")]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings()


def _engine(settings: Settings):
    from sheetman.adapters.openpyxl_codec import OpenpyxlCodec
    from sheetman.engine.operations import TableOperationEngine
    from sheetman.io.storage import LocalStorage

    storage = LocalStorage(settings.base_dir, settings.default_path)
    return TableOperationEngine(storage, OpenpyxlCodec(), settings)


def _emit(envelope, code=None):
    print_response(envelope)
    raise typer.Exit(code if code is not None else exit_code_for(envelope))


def _check_header_mode(command: str, header_mode: str | None, file: str) -> None:
    if header_mode is not None and header_mode not in ("legacy", "strict"):
        _emit(error_envelope(
            command, "ERR_INVALID_ARGUMENT",
            f"Unknown header mode '{header_mode}'. Valid: legacy, strict",
            target=Target(file=file),
        ))


def _run_item(ctx: typer.Context, command: str, params: ItemParams, out: str | None = None) -> None:
    engine = _engine(_settings(ctx))
    item: ItemResult = engine.execute(params)
    include_binary = True
    written_to = None
    if out and item.binary is not None:
        try:
            Path(out).write_bytes(item.binary.to_bytes())
        except OSError as e:
            _emit(error_envelope(command, "ERR_IO", f"Cannot write --out file: {e}", target=item.target))
        include_binary = False
        written_to = out
    env = item_envelope(command, item, include_binary=include_binary)
    if written_to:
        env.result["written_to"] = written_to
    _emit(env)


# ---------------------------------------------------------------------------
# sheetman version
# ---------------------------------------------------------------------------
@app.command()
def version():
    """Print the sheetman version.

    Example: `sheetman version`
    """
    env = success_envelope("version", {"version": sheetman.__version__})
    _emit(env)


# ---------------------------------------------------------------------------
# sheetman read
# ---------------------------------------------------------------------------
@app.command("read")
def read_cmd(
    ctx: typer.Context,
    file: FilePath = "",
    out: OutOpt = None,
):
    """Return the raw workbook file, base64-encoded. Non-mutating.

    A missing file is a soft outcome (`ok: false`, exit 1), not an error.

    Example: `sheetman read -f reports/q1.xlsx -o /tmp/q1.xlsx`
    """
    _run_item(ctx, "read", ItemParams(operation="readFile", file_path=file), out)


# ---------------------------------------------------------------------------
# sheetman view
# ---------------------------------------------------------------------------
@app.command("view")
def view_cmd(
    ctx: typer.Context,
    file: FilePath = "",
    sheet: SheetOpt = "",
    header_mode: HeaderModeOpt = None,
    out: OutOpt = None,
):
    """Read a sheet's data rows as records keyed by the header row.

    Example: `sheetman view -f people.xlsx -s People`
    """
    _check_header_mode("view", header_mode, file)
    params = ItemParams(operation="view", file_path=file, sheet_name=sheet, header_mode=header_mode)
    _run_item(ctx, "view", params, out)


# ---------------------------------------------------------------------------
# sheetman create
# ---------------------------------------------------------------------------
@app.command("create")
def create_cmd(
    ctx: typer.Context,
    file: FilePath = "",
    sheet: SheetOpt = "",
    data: Annotated[Optional[str], typer.Option("--data", help="Inline JSON array of row objects, e.g. '[{\"Name\":\"Ana\"}]'")] = None,
    data_file: Annotated[Optional[str], typer.Option("--data-file", help="Path to JSON file containing an array of row objects")] = None,
    header: Annotated[Optional[list[str]], typer.Option("--header", "-H", help="Header override; repeat to set several, in order")] = None,
    fill: Annotated[str, typer.Option("--fill", help="Value for fields missing from a record; 'null' leaves the cell empty")] = "null",
    append: Annotated[bool, typer.Option("--append", help="Append to the existing sheet instead of replacing its rows")] = False,
    file_name: Annotated[Optional[str], typer.Option("--file-name", help="Workbook title metadata (does not change the storage path)")] = None,
    header_mode: HeaderModeOpt = None,
    dry_run: DryRunOpt = False,
):
    """Write records into a sheet, creating the file and sheet as needed. Mutating.

    Headers are the union of the existing headers (when appending), `--header`
    overrides and the keys found in the records, in that order.

    Example: `sheetman create -f people.xlsx -s People --data '[{"Name":"Ana","Age":30}]'`

    Example: `sheetman create -f people.xlsx -s People --append --data-file more.json --fill "-"`
    """
    _check_header_mode("create", header_mode, file)
    if data is not None:
        payload: Any = data
    elif data_file:
        try:
            payload = read_text_safe(data_file)
        except OSError as e:
            _emit(error_envelope("create", "ERR_INVALID_INPUT", f"Cannot read --data-file: {e}", target=Target(file=file)))
            return
    else:
        _emit(error_envelope("create", "ERR_MISSING_DATA", "Provide --data or --data-file", target=Target(file=file)))
        return

    params = ItemParams(
        operation="create",
        file_path=file,
        file_name=file_name,
        sheet_name=sheet,
        append=append,
        headers=header or [],
        default_fill_value=fill,
        data=payload,
        header_mode=header_mode,
        dry_run=dry_run,
    )
    _run_item(ctx, "create", params)


# ---------------------------------------------------------------------------
# sheetman edit
# ---------------------------------------------------------------------------
@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    where_column: Annotated[str, typer.Option("--where-column", "-w", help="Column to match on (case-insensitive)")],
    where_value: Annotated[str, typer.Option("--where-value", help="Exact value to match (trimmed, case-sensitive)")],
    new_value: Annotated[str, typer.Option("--new-value", "-n", help="Value written into the target column")],
    file: FilePath = "",
    sheet: SheetOpt = "",
    target_column: Annotated[str, typer.Option("--target-column", "-t", help="Column to update (default: the --where-column)")] = "",
    cell_type: Annotated[str, typer.Option("--type", help="Type of --new-value: text, number, bool or auto")] = "text",
    header_mode: HeaderModeOpt = None,
    dry_run: DryRunOpt = False,
):
    """Update every row whose column matches a value. Mutating.

    No matching row is a soft outcome (`ok: false`, exit 1); the file is not rewritten.

    Example: `sheetman edit -f people.xlsx -s People -w Name --where-value Ana -t Age -n 31 --type number`
    """
    from sheetman.tabular.cells import coerce_cell

    _check_header_mode("edit", header_mode, file)
    try:
        value = coerce_cell(new_value, cell_type)
    except ValueError as e:
        _emit(error_envelope("edit", "ERR_INVALID_ARGUMENT", str(e), target=Target(file=file, sheet=sheet or None)))
        return

    params = ItemParams(
        operation="edit",
        file_path=file,
        sheet_name=sheet,
        condition_column=where_column,
        condition_value=where_value,
        target_column=target_column,
        new_value=value,
        header_mode=header_mode,
        dry_run=dry_run,
    )
    _run_item(ctx, "edit", params)


# ---------------------------------------------------------------------------
# sheetman delete
# ---------------------------------------------------------------------------
@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    file: FilePath = "",
):
    """Delete the workbook file. Mutating.

    A missing file is a soft outcome (`ok: false`, exit 1).

    Example: `sheetman delete -f people.xlsx`
    """
    _run_item(ctx, "delete", ItemParams(operation="deleteFile", file_path=file))


# ---------------------------------------------------------------------------
# sheetman run
# ---------------------------------------------------------------------------
@app.command("run", epilog=_RUN_EPILOG)
def run_cmd(
    ctx: typer.Context,
    batch_file: Annotated[str, typer.Option("--batch", "-b", help="Path to a YAML/JSON batch file")],
    continue_on_fail: Annotated[
        Optional[bool],
        typer.Option("--continue-on-fail/--stop-on-fail", help="Keep running items after a failed one (default from the batch file)"),
    ] = None,
):
    """Execute a batch of items in order.

    By default a failed item stops the batch and the remaining items are
    reported as skipped. Soft outcomes never stop it.

    Example: `sheetman run --batch nightly.yaml --continue-on-fail`
    """
    from sheetman.engine.batch import BatchValidationError, load_batch, run_batch

    settings = _settings(ctx)
    with Timer() as t:
        try:
            spec = load_batch(batch_file)
        except BatchValidationError as e:
            _emit(error_envelope("run", "ERR_BATCH_INVALID", str(e), details={"issues": e.details}))
            return
        except Exception as e:
            _emit(error_envelope("run", "ERR_BATCH_INVALID", f"Cannot parse batch: {e}"))
            return

        keep_going = continue_on_fail
        if keep_going is None and settings.continue_on_fail:
            keep_going = True
        summary = run_batch(spec, _engine(settings), continue_on_fail=keep_going)

    env = success_envelope("run", summary.model_dump(mode="json"), duration_ms=t.elapsed_ms)
    if not summary.ok:
        env.ok = False
        for idx, item in enumerate(summary.items):
            if item.error is not None:
                env.errors.append(item.error.model_copy(update={
                    "message": f"Item {idx} ({item.operation}): {item.error.message}",
                }))
    _emit(env)


# ---------------------------------------------------------------------------
# Entrypoint (for `python -m sheetman`)
# ---------------------------------------------------------------------------
def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        # Any unhandled exception still produces a JSON envelope.
        env = error_envelope("unknown", "ERR_INTERNAL", str(exc))
        print_response(env)
        raise SystemExit(90) from exc


if __name__ == "__main__":
    main()
