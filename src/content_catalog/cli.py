"""CLI for the content catalog (browse, edit, export, import)."""

import json
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from content_catalog.catalogs import CATALOGS
from content_catalog.config import DB_FILENAME, resolve_data_directory
from content_catalog.core.database.schema import migrate_schema, set_metadata
from content_catalog.core.importer.json_reader import read_snapshot
from content_catalog.core.tree.markdown import render_address_as_markdown
from content_catalog.core.tree.navigation import ContainerKind, NavigationCursor
from content_catalog.engine import CatalogEngine, build_engine
from content_catalog.errors import CatalogError, PartialCascadeFailure
from content_catalog.logging_config import configure_logging
from content_catalog.models.node import Address
from content_catalog.writer import export_filename, write_snapshot

app = typer.Typer(help="Content catalog: browse and edit partitioned lesson trees.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Catalog database directory"),
]
SelectorOption = Annotated[
    list[str] | None,
    typer.Option("--selector", "-s", help="Selector value as axis=value (repeatable)"),
]
ActorOption = Annotated[str, typer.Option("--by", help="Actor id recorded as creator")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _db_path(data_dir: Path | None) -> Path:
    return (data_dir or resolve_data_directory()) / DB_FILENAME


def _open_db(data_dir: Path | None) -> sqlite3.Connection:
    """Open the catalog database, raising if it doesn't exist."""
    db_path = _db_path(data_dir)
    if not db_path.exists():
        logger.error("Catalog database not found: {}. Run 'init' first.", db_path)
        raise typer.Exit(1)
    conn = sqlite3.connect(str(db_path))
    migrate_schema(conn)
    return conn


def _engine(conn: sqlite3.Connection, catalog: str) -> CatalogEngine:
    if catalog not in CATALOGS:
        logger.error("Unknown catalog {!r} (known: {})", catalog, ", ".join(sorted(CATALOGS)))
        raise typer.Exit(1)
    return build_engine(conn, catalog)


def _address(engine: CatalogEngine, partition: str, selectors: list[str] | None) -> Address:
    pairs: dict[str, str] = {}
    for raw in selectors or []:
        axis, sep, value = raw.partition("=")
        if not sep:
            logger.error("Selector must look like axis=value, got {!r}", raw)
            raise typer.Exit(1)
        pairs[axis] = value
    with _engine_errors():
        return engine.schema.address(partition, **pairs)


@contextmanager
def _engine_errors() -> Iterator[None]:
    """Log engine errors and exit with status 1."""
    try:
        yield
    except PartialCascadeFailure as e:
        logger.error("{} (remaining: {})", e, ", ".join(sorted(e.remaining)))
        raise typer.Exit(1) from e
    except CatalogError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """Create the catalog database."""
    db_path = _db_path(data_dir)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    try:
        migrate_schema(conn)
    finally:
        conn.close()
    typer.echo(f"Catalog database ready at {db_path}")


@app.command()
def catalogs() -> None:
    """List the built-in catalogs and their shapes."""
    for name, schema in sorted(CATALOGS.items()):
        axes = " x ".join(axis.name for axis in schema.axes)
        typer.echo(f"  {name}: {axes}, {schema.max_depth} folder level(s)")


def _enter_path(engine: CatalogEngine, cursor: NavigationCursor, path: list[str]) -> None:
    """Drive the cursor with selector values, then node names or ids."""
    for step in path:
        container = cursor.current_container()
        # Selector containers have no address yet.
        if container.address is None:
            cursor.enter(step)
            continue
        children = engine.tree.list_children(container.address, container.node_id)
        match = next((c for c in children if step in (c.name, c.id)), None)
        cursor.enter(match if match is not None else step)


@app.command()
def ls(
    catalog: str = typer.Argument(..., help="Catalog name"),
    path: Annotated[
        list[str] | None,
        typer.Argument(help="Selector values, then folder names or ids"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show what is at a drill-down path, with item counts."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        cursor = engine.cursor()
        with _engine_errors():
            _enter_path(engine, cursor, path or [])
            container = cursor.current_container()

        typer.echo(cursor.breadcrumb_path())
        address = container.address
        if container.axis is not None:
            by_partition = engine.counts.count_by_partition() if cursor.depth == 0 else {}
            for value in container.axis.values:
                count = by_partition.get(value.value)
                suffix = f" ({count})" if count is not None else ""
                typer.echo(f"  {value.value}: {value.label}{suffix}")
        elif address is not None and container.kind is ContainerKind.NODES:
            totals = engine.counts.count_siblings(address, container.node_id)
            for node in engine.tree.list_children(address, container.node_id):
                typer.echo(f"  {node.order}. {node.name} ({totals[node.id]})  id={node.id}")
        elif address is not None:
            shown = engine.items.list_at(address, container.node_id)
            typer.echo(f"  {len(shown)} item(s)")
            for item in shown:
                typer.echo(f"  - {engine.schema.item_key(item.payload)}  id={item.id}")
    finally:
        conn.close()


@app.command()
def tree(
    catalog: str = typer.Argument(..., help="Catalog name"),
    partition: str = typer.Argument(..., help="Partition value, e.g. N5"),
    selector: SelectorOption = None,
    items: bool = typer.Option(False, "--items", "-i", help="List items too"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max folder levels to render"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Print an address's folder tree as markdown."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        address = _address(engine, partition, selector)
        typer.echo(
            render_address_as_markdown(
                engine.tree, engine.items,
                address=address, include_items=items, max_depth=max_depth,
            ),
            nl=False,
        )
    finally:
        conn.close()


@app.command("add-node")
def add_node(
    catalog: str = typer.Argument(..., help="Catalog name"),
    partition: str = typer.Argument(..., help="Partition value"),
    name: str = typer.Argument(..., help="Folder name"),
    parent: Annotated[str | None, typer.Option("--parent", "-p", help="Parent node id")] = None,
    selector: SelectorOption = None,
    by: ActorOption = "admin",
    data_dir: DataDirOption = None,
) -> None:
    """Create a folder at the end of its sibling list."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        address = _address(engine, partition, selector)
        with _engine_errors():
            node = engine.tree.create_node(address, parent, name, by)
        typer.echo(f"Created {node.name!r} (order {node.order})  id={node.id}")
    finally:
        conn.close()


@app.command("add-item")
def add_item(
    catalog: str = typer.Argument(..., help="Catalog name"),
    partition: str = typer.Argument(..., help="Partition value"),
    payload: str = typer.Argument(..., help="Item payload as a JSON object"),
    node: Annotated[str | None, typer.Option("--node", "-n", help="Owning node id")] = None,
    selector: SelectorOption = None,
    by: ActorOption = "admin",
    data_dir: DataDirOption = None,
) -> None:
    """Add an item to a folder, or unfiled when the address has no folders."""
    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.error("Payload is not valid JSON: {}", e)
        raise typer.Exit(1) from e
    if not isinstance(data, dict):
        logger.error("Payload must be a JSON object")
        raise typer.Exit(1)

    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        address = _address(engine, partition, selector)
        with _engine_errors():
            item = engine.items.create(address, node, data, by)
        typer.echo(f"Created item  id={item.id}")
    finally:
        conn.close()


@app.command()
def rename(
    catalog: str = typer.Argument(..., help="Catalog name"),
    node_id: str = typer.Argument(..., help="Node id"),
    name: str = typer.Argument(..., help="New name"),
    data_dir: DataDirOption = None,
) -> None:
    """Rename a folder."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        with _engine_errors():
            engine.tree.rename_node(node_id, name)
        typer.echo(f"Renamed {node_id} to {name!r}")
    finally:
        conn.close()


@app.command()
def toggle(
    catalog: str = typer.Argument(..., help="Catalog name"),
    node_id: str = typer.Argument(..., help="Node id"),
    flag: str = typer.Argument(..., help="'lock' or 'hide'"),
    data_dir: DataDirOption = None,
) -> None:
    """Flip a folder's locked or hidden flag."""
    if flag not in ("lock", "hide"):
        logger.error("Flag must be 'lock' or 'hide', got {!r}", flag)
        raise typer.Exit(1)
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        with _engine_errors():
            if flag == "lock":
                state = engine.tree.toggle_lock(node_id)
            else:
                state = engine.tree.toggle_hide(node_id)
        label = "locked" if flag == "lock" else "hidden"
        typer.echo(f"{node_id} {label}={state}")
    finally:
        conn.close()


@app.command()
def delete(
    catalog: str = typer.Argument(..., help="Catalog name"),
    node_id: str = typer.Argument(..., help="Node id"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a folder with all its sub-folders and items."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        with _engine_errors():
            engine.tree.delete_node(node_id)
        typer.echo(f"Deleted {node_id}")
    finally:
        conn.close()


@app.command()
def reorder(
    catalog: str = typer.Argument(..., help="Catalog name"),
    dragged: str = typer.Argument(..., help="Id of the dragged folder"),
    target: str = typer.Argument(..., help="Id of the folder it is dropped on"),
    data_dir: DataDirOption = None,
) -> None:
    """Move a folder to another folder's position in the same sibling list."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        with _engine_errors():
            changed = engine.reorderer.reorder(dragged, target)
        typer.echo(f"Reordered: {len(changed)} folder(s) renumbered")
    finally:
        conn.close()


@app.command()
def move(
    catalog: str = typer.Argument(..., help="Catalog name"),
    partition: str = typer.Argument(..., help="Destination partition value"),
    item_ids: list[str] = typer.Argument(..., help="Ids of items to move"),
    node: Annotated[
        str | None, typer.Option("--node", "-n", help="Destination node id")
    ] = None,
    selector: SelectorOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Move items to another partition or folder."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        address = _address(engine, partition, selector)
        with _engine_errors():
            report = engine.mover.move(item_ids, address, node)
        typer.echo(f"Moved {len(report.moved)} item(s), {len(report.unchanged)} already there")
    finally:
        conn.close()


@app.command(name="export")
def export_cmd(
    catalog: str = typer.Argument(..., help="Catalog name"),
    node_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Root folder ids to export (default: whole catalog)"),
    ] = None,
    partition: Annotated[
        str | None,
        typer.Option("--partition", "-P", help="Export one whole address instead"),
    ] = None,
    selector: SelectorOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Snapshot file (default: dated name)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Export folders and items to a portable JSON snapshot."""
    conn = _open_db(data_dir)
    try:
        engine = _engine(conn, catalog)
        with _engine_errors():
            if node_ids:
                snapshot = engine.exporter.export_subtree(node_ids)
            elif partition:
                snapshot = engine.exporter.export_address(_address(engine, partition, selector))
            else:
                snapshot = engine.exporter.export_all()
        path = output or Path(export_filename(catalog))
        write_snapshot(path, snapshot)
        typer.echo(
            f"Exported {len(snapshot.nodes)} folder(s) and {len(snapshot.items)} item(s) to {path}"
        )
    finally:
        conn.close()


@app.command(name="import")
def import_cmd(
    snapshot_file: Path = typer.Argument(..., help="Snapshot JSON file"),
    by: ActorOption = "admin",
    data_dir: DataDirOption = None,
) -> None:
    """Import a snapshot, skipping folders and items that already exist."""
    if not snapshot_file.exists():
        logger.error("Snapshot file not found: {}", snapshot_file)
        raise typer.Exit(1)

    conn = _open_db(data_dir)
    try:
        with _engine_errors():
            snapshot = read_snapshot(snapshot_file)
        engine = _engine(conn, snapshot.type)
        with _engine_errors():
            report = engine.importer.import_snapshot(snapshot, by)
        set_metadata(conn, f"last_import_at:{snapshot.type}", str(int(time.time())))
        typer.echo(
            f"Folders: {report.nodes_created} created, {report.nodes_skipped} skipped; "
            f"items: {report.items_created} created, {report.items_skipped} skipped"
        )
        for error in report.errors:
            typer.echo(f"  error ({error.record_kind} {error.natural_key}): {error}")
        if report.errors:
            raise typer.Exit(1)
    finally:
        conn.close()
