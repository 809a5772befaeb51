"""CLI entry point for midnight-did.

Invoked as::

    midnight-did [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m midnight_did.cli.main

Commands
--------
version         Show version information
did parse       Parse a did:midnight identifier
did create      Build the DID for a contract address
ops encode      Encode domain operations into a ledger batch
ops verify      Check a raw ledger batch before submission
resolve         Assemble the DID document from a ledger state snapshot

The network used by ``did create`` and ``resolve`` defaults to the
``MIDNIGHT_DID_NETWORK`` environment variable, then ``undeployed``.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from midnight_did.did.method import MidnightNetwork
from midnight_did.errors import MidnightDIDError

console = Console()

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

network_option = click.option(
    "--network",
    type=click.Choice([network.value for network in MidnightNetwork]),
    default=MidnightNetwork.UNDEPLOYED.value,
    envvar="MIDNIGHT_DID_NETWORK",
    show_default=True,
    help="Network the contract is deployed to.",
)

output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the JSON result to this file instead of stdout.",
)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="midnight-did")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Encode, verify and resolve did:midnight DIDs"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from midnight_did import __version__

    console.print(f"[bold]midnight-did[/bold] v{__version__}")


# ------------------------------------------------------------------
# did command group
# ------------------------------------------------------------------


@cli.group(name="did")
def did_group() -> None:
    """Work with did:midnight identifiers."""


@did_group.command(name="parse")
@click.argument("did")
def parse_command(did: str) -> None:
    """Parse DID and show its network and contract address."""
    from midnight_did.did.method import parse_method_identifier

    try:
        parsed = parse_method_identifier(did)
    except MidnightDIDError as exc:
        _fail(exc)

    table = Table(title="did:midnight", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("DID", parsed.raw)
    table.add_row("Network", parsed.network.value)
    table.add_row("Contract address", parsed.id)
    console.print(table)


@did_group.command(name="create")
@click.argument("address")
@network_option
def create_command(address: str, network: str) -> None:
    """Print the DID of the contract at ADDRESS."""
    from midnight_did.did.method import create_method_identifier_string

    try:
        did = create_method_identifier_string(address, network)
    except MidnightDIDError as exc:
        _fail(exc)

    console.print(did, soft_wrap=True)


# ------------------------------------------------------------------
# ops command group
# ------------------------------------------------------------------


@cli.group(name="ops")
def ops_group() -> None:
    """Encode and verify ledger operation batches."""


@ops_group.command(name="encode")
@click.argument("operations_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--no-pad",
    is_flag=True,
    default=False,
    help="Emit only the encoded operations, without padding or validation.",
)
@output_option
def encode_command(operations_file: str, no_pad: bool, output: str | None) -> None:
    """Encode the JSON list of operations in OPERATIONS_FILE."""
    from midnight_did.did.operations import parse_did_operations
    from midnight_did.ledger.encoder import encode_batch, prepare_batch

    data = _load_json(operations_file)
    try:
        operations = parse_did_operations(data)
        batch = encode_batch(operations) if no_pad else prepare_batch(operations)
    except MidnightDIDError as exc:
        _fail(exc)

    _emit([op.to_dict() for op in batch], output)


@ops_group.command(name="verify")
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False))
def verify_command(batch_file: str) -> None:
    """Check the raw ledger batch in BATCH_FILE."""
    from midnight_did.ledger.builder import OperationBuilder
    from midnight_did.ledger.types import OperationType

    data = _load_json(batch_file)
    try:
        batch = OperationBuilder.verify_operations(data)
    except MidnightDIDError as exc:
        _fail(exc)

    table = Table(title="Ledger batch", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Operation", style="cyan")
    for index, op in enumerate(batch):
        table.add_row(str(index), OperationType(op["operationType"]).name)
    console.print(table)
    console.print(f"[green]Valid[/green] batch of {len(batch)} operations")


# ------------------------------------------------------------------
# resolve
# ------------------------------------------------------------------


@cli.command(name="resolve")
@click.argument("state_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("address")
@network_option
@click.option(
    "--raw",
    is_flag=True,
    default=False,
    help="Show the ledger state itself instead of the assembled document.",
)
@output_option
def resolve_command(
    state_file: str,
    address: str,
    network: str,
    raw: bool,
    output: str | None,
) -> None:
    """Assemble the DID document of ADDRESS from the state in STATE_FILE."""
    from midnight_did.ledger.decoder import assemble_document, ledger_state_to_json
    from midnight_did.ledger.types import LedgerState

    data = _load_json(state_file)
    try:
        state = LedgerState.from_dict(data)
        if raw:
            result = ledger_state_to_json(state)
        else:
            result = assemble_document(state, network, address).to_dict()
    except MidnightDIDError as exc:
        _fail(exc)

    _emit(result, output)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
    sys.exit(1)


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Error:[/red] {path} is not valid JSON: {exc}", soft_wrap=True)
        sys.exit(1)


def _emit(data: Any, output: str | None) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Written to[/green] {output}")
    else:
        console.print_json(text)


if __name__ == "__main__":
    cli()
