"""CLI entry point for blockclip."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from block_tree import BlockNode, SymbolRef
from blockclip.config import load_config
from blockclip.models.config import Config
from blockclip.models.viewport import PointerSnapshot
from blockclip.services.clipboard import ClipboardBoundary, MemoryClipboard, create_clipboard
from blockclip.services.codec import decode_payload
from blockclip.services.document_store import JsonDocument
from blockclip.services.exceptions import EmptyClipboard, TransferError
from blockclip.services.orchestrator import TransferOrchestrator
from blockclip.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def load_document(path: Path, config: Config) -> JsonDocument:
    """
    Load a JSON block document.

    Raises:
        click.ClickException: If the document is missing or invalid
    """
    try:
        return JsonDocument.load(path, markers=config.symbols.markers)
    except (FileNotFoundError, ValueError, TransferError) as e:
        logger.error("document_load_error", path=str(path), error=str(e))
        raise click.ClickException(str(e))


def report_transfer_error(error: TransferError) -> None:
    """Print a transfer failure and exit with status 1."""
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    sys.exit(1)


def build_block_tree(node: BlockNode, tree: Tree) -> None:
    """Add ``node`` and its descendants to a rich Tree."""
    fields = []
    for name, value in node.fields.items():
        if isinstance(value, SymbolRef):
            type_label = f": {value.declared_type}" if value.declared_type else ""
            fields.append(f"{name}=[cyan]${value.name}{type_label}[/cyan]")
        else:
            fields.append(f"{name}={value!r}")

    label = f"[bold]{node.kind}[/bold]"
    if fields:
        label += " " + " ".join(fields)
    if node.position is not None:
        label += f" [dim]@({node.position.x:g}, {node.position.y:g})[/dim]"

    branch = tree.add(label)
    for slot, input_slot in node.inputs.items():
        if input_slot.block is not None:
            build_block_tree(input_slot.block, branch.add(f"[green]{slot}[/green]"))
        if input_slot.shadow is not None:
            build_block_tree(input_slot.shadow, branch.add(f"[dim]{slot} (shadow)[/dim]"))
    if node.next is not None:
        build_block_tree(node.next, tree)


@click.group()
@click.version_option(version="0.1.0", prog_name="blockclip")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.config/blockclip/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]):
    """blockclip: copy and paste block subtrees between visual-program documents."""
    configure_logging()

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("block_ids", nargs=-1, required=True)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the payload instead of writing the clipboard")
@click.pass_context
def copy(ctx: click.Context, document: Path, block_ids: tuple[str, ...], to_stdout: bool):
    """
    Copy blocks (with everything nested inside them) to the clipboard.

    Blocks stacked below a copied block are not included.

    Examples:
        blockclip copy program.json 3f2a...       # Copy one block
        blockclip copy program.json ID1 ID2       # Copy two blocks together
        blockclip copy program.json ID1 --stdout  # Print payload
    """
    config: Config = ctx.obj["config"]
    doc = load_document(document, config)

    nodes = []
    for block_id in block_ids:
        node = doc.find_block(block_id)
        if node is None:
            raise click.ClickException(f"Block not found: {block_id}")
        nodes.append(node)

    clipboard: ClipboardBoundary
    if to_stdout:
        clipboard = MemoryClipboard()
    else:
        clipboard = create_clipboard(config.clipboard.backend)

    orchestrator = TransferOrchestrator(doc, clipboard, config=config)

    try:
        text = asyncio.run(orchestrator.copy(nodes))
    except TransferError as e:
        report_transfer_error(e)
        return

    if to_stdout or config.clipboard.backend == "memory":
        click.echo(text)
    else:
        console.print(f"[green]✓[/green] Copied {len(nodes)} block(s) to the clipboard")


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--at",
    "screen_pos",
    type=(float, float),
    required=True,
    help="Screen position (x y) to paste at; mapped through the document's viewport",
)
@click.option(
    "--mode",
    type=click.Choice(["relative", "absolute"]),
    default=None,
    help="Override placement mode (default: from config)",
)
@click.option("--stdin", "from_stdin", is_flag=True, help="Read the payload from standard input")
@click.option("--dry-run", is_flag=True, help="Show the result without saving the document")
@click.pass_context
def paste(
    ctx: click.Context,
    document: Path,
    screen_pos: tuple[float, float],
    mode: Optional[str],
    from_stdin: bool,
    dry_run: bool,
):
    """
    Paste the clipboard into a document at a screen position.

    Examples:
        blockclip paste program.json --at 420 310
        blockclip copy a.json ID --stdout | blockclip paste b.json --at 0 0 --stdin
    """
    config: Config = ctx.obj["config"]
    doc = load_document(document, config)

    clipboard: ClipboardBoundary
    if from_stdin:
        clipboard = MemoryClipboard(click.get_text_stream("stdin").read())
    else:
        clipboard = create_clipboard(config.clipboard.backend)

    orchestrator = TransferOrchestrator(doc, clipboard, config=config)
    pointer = PointerSnapshot(x=screen_pos[0], y=screen_pos[1])

    try:
        report = asyncio.run(orchestrator.paste(pointer=pointer, mode=mode))
    except TransferError as e:
        report_transfer_error(e)
        return

    table = Table(title="Paste result")
    table.add_column("Item")
    table.add_column("Details")
    for block_id in report.merged_block_ids:
        block = doc.find_block(block_id)
        position = f"({block.position.x:g}, {block.position.y:g})" if block and block.position else "-"
        table.add_row("block", f"{block.kind if block else '?'} {block_id} at {position}")
    for symbol in report.created_symbols:
        table.add_row("new symbol", f"{symbol.name}: {symbol.type or 'untyped'}")
    for rename in report.renames:
        table.add_row("renamed", f"{rename.original_name} -> {rename.new_name}")
    for correction in report.corrections:
        table.add_row("field reset", f"{correction.kind}.{correction.field_name}")
    for warning in report.warnings:
        table.add_row("[yellow]warning[/yellow]", warning)
    if report.retried:
        table.add_row("retry", "empty fields were dropped to satisfy the document")
    console.print(table)

    if dry_run:
        console.print("[dim]Dry run: document not saved[/dim]")
        return

    saved = doc.save()
    logger.info("document_saved", path=str(saved))
    console.print(f"[green]✓[/green] Saved {saved}")


@cli.command()
@click.option("--stdin", "from_stdin", is_flag=True, help="Read the payload from standard input")
@click.pass_context
def inspect(ctx: click.Context, from_stdin: bool):
    """Show the block payload currently on the clipboard."""
    config: Config = ctx.obj["config"]

    clipboard: ClipboardBoundary
    if from_stdin:
        clipboard = MemoryClipboard(click.get_text_stream("stdin").read())
    else:
        clipboard = create_clipboard(config.clipboard.backend)

    try:
        text = asyncio.run(clipboard.read_text())
        if text is None or not text.strip():
            raise EmptyClipboard()
        payload = decode_payload(text, config.symbols.markers)
    except TransferError as e:
        report_transfer_error(e)
        return

    tree = Tree(f"[bold]Clipboard[/bold] ({len(payload.roots)} subtree(s), {payload.block_count()} block(s))")
    for root in payload.roots:
        build_block_tree(root, tree)
    console.print(tree)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
