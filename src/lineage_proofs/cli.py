#!/usr/bin/env python3
"""
Lineage Proofs CLI

Command-line interface for building Merkle inclusion proofs over lineage
records and for inspecting the lineage graph behind them.
"""

import json
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .api import ProvingServiceClient
from .config import get_settings
from .errors import LineageProofError
from .lineage import FAMILIES
from .main import (
    generate_lineage_proof,
    generate_lineage_view,
    inspect_records,
    verify_proof_payload,
)
from .models import ErrorResponse, HealthResponse
from .oracle import ORACLES, create_oracle

# Configure rich console
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _fail(e: LineageProofError):
    error = ErrorResponse(**e.to_dict())
    logger.debug(f"Command failed: {error.model_dump_json()}")
    raise click.ClickException(f"[{error.code}] {error.error}")


def print_proof_result(result, format_output: str = "table"):
    """Print proof results in various formats."""
    if format_output == "json":
        console.print_json(json.dumps(result.to_dict(), indent=2))
        return

    payload = result.payload
    table = Table(title="Lineage Proof Inputs")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Ancestor", payload.ancestor_id)
    table.add_row("Relation", payload.relation)
    table.add_row("Descendant", payload.descendant_id)
    table.add_row("Leaf Index", str(payload.merkle_leaf_index))
    table.add_row("Leaf", result.leaf)
    table.add_row("Merkle Root", payload.merkle_root)
    for key, value in result.metadata.items():
        table.add_row(key.replace("_", " ").title(), str(value))

    console.print(table)

    console.print("\n[bold cyan]Merkle Path (leaf to root):[/bold cyan]")
    for i, step in enumerate(payload.merkle_path):
        console.print(f"  {i:2d}: {step}")


def print_lineage(response, format_output: str = "table"):
    """Print a lineage view as JSON or as tables."""
    if format_output == "json":
        console.print_json(response.model_dump_json(indent=2))
        return

    target = response.target
    name = target.full_name or "-"
    console.print(Panel(
        f"[bold]{name}[/bold]  ({target.public_id})\n"
        f"Relationship: {target.relationship or '-'}",
        title="Target",
    ))

    chain = Table(title="Ancestor Chain (root first)")
    chain.add_column("#", style="cyan")
    chain.add_column("Public ID", style="green")
    chain.add_column("Name")
    chain.add_column("Location")
    chain.add_column("Role")
    chain.add_column("Members", style="yellow")
    for i, entry in enumerate(response.ancestor_chain):
        chain.add_row(
            str(i), entry.public_id or "-", entry.name, entry.location, entry.role or "-", str(len(entry.members))
        )
    console.print(chain)

    if response.cycle_detected:
        console.print("[yellow]Cycle detected in the hierarchy; chain stops at the repeated node.[/yellow]")
    if response.truncated:
        console.print("[yellow]Ancestor chain truncated at the configured maximum depth.[/yellow]")

    siblings = Table(title="Siblings")
    siblings.add_column("Public ID", style="green")
    siblings.add_column("Name")
    siblings.add_column("Relationship")
    for sibling in response.siblings:
        siblings.add_row(
            sibling.public_id or "-",
            sibling.full_name,
            sibling.relationship or "-",
        )
    console.print(siblings)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--oracle",
    type=click.Choice(sorted(ORACLES)),
    envvar="HASH_ORACLE",
    help="Hash oracle (poseidon-service for circuit-compatible proofs)",
)
@click.version_option(__version__, prog_name="lineage-proofs")
@click.pass_context
def cli(ctx, verbose: bool, oracle: Optional[str]):
    """
    Lineage Proofs CLI - Merkle commitments over lineage records.

    Builds fixed-depth Poseidon Merkle proofs that a record belongs to a
    committed set, and resolves the ancestor chain of a record.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["oracle"] = oracle


@cli.command()
@click.argument("descendant_id")
@click.argument("relationship", required=False)
@click.option("--records-file", required=True, type=click.Path(exists=True, dir_okay=False), help="Record export JSON file")
@click.option("--ancestor-id", type=str, help="Expected ancestor public id; rejected if it differs")
@click.option("--family", type=click.Choice(sorted(FAMILIES)), envvar="RECORD_FAMILY", help="Entity family of the records")
@click.option("--submit", is_flag=True, help="Submit the payload to the proving service")
@click.option("--format", "format_output", type=click.Choice(["table", "json"]), default="table", help="Output format")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Also write the payload JSON to this file")
@click.pass_context
def prove(
    ctx,
    descendant_id: str,
    relationship: Optional[str],
    records_file: str,
    ancestor_id: Optional[str] = None,
    family: Optional[str] = None,
    submit: bool = False,
    format_output: str = "table",
    output: Optional[str] = None,
):
    """
    Build the proving inputs for one record.

    DESCENDANT_ID: Public id of the record to prove. Without RELATIONSHIP this
    may also be a group public id, proven through its head record (else its
    first member).

    RELATIONSHIP: Relation the record carries (e.g. father, citizen, surgery).
    Defaults to the stored relationship of the resolved record.
    """
    try:
        result = generate_lineage_proof(
            records_file,
            descendant_id,
            relationship,
            family=family,
            oracle=ctx.obj.get("oracle"),
            ancestor_id=ancestor_id,
        )

        if not result.metadata["circuit_compatible"] and format_output != "json":
            console.print(
                f"[yellow]Oracle '{result.metadata['oracle']}' is not circuit compatible; "
                f"this proof is for development only.[/yellow]"
            )

        print_proof_result(result, format_output)

        if output:
            with open(output, "w", encoding="utf-8") as f:
                json.dump(result.payload.model_dump(), f, indent=2)
            if format_output != "json":
                console.print(f"[green]Payload written to {output}[/green]")

        if submit:
            client = ProvingServiceClient()
            response = client.generate_proof(result.payload)
            console.print(Panel(json.dumps(response, indent=2), title="Proving Service Response"))

    except LineageProofError as e:
        _fail(e)


@cli.command()
@click.argument("identifier")
@click.option("--records-file", required=True, type=click.Path(exists=True, dir_okay=False), help="Record export JSON file")
@click.option("--family", type=click.Choice(sorted(FAMILIES)), envvar="RECORD_FAMILY", help="Entity family of the records")
@click.option("--preload-depth", type=click.IntRange(min=1), help="Parent levels fetched per store query")
@click.option("--format", "format_output", type=click.Choice(["table", "json"]), default="table", help="Output format")
def lineage(identifier: str, records_file: str, family: Optional[str], preload_depth: Optional[int], format_output: str):
    """
    Show the ancestor chain and siblings of a record.

    IDENTIFIER: Public id of a record, or of a group (resolved to its head)
    """
    try:
        response = generate_lineage_view(records_file, identifier, family=family, preload_depth=preload_depth)
        print_lineage(response, format_output)
    except LineageProofError as e:
        _fail(e)


@cli.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def verify(ctx, payload_file: str):
    """
    Re-verify a saved proving payload against its own root.

    PAYLOAD_FILE: JSON file written by ``prove --output`` or ``prove --format json``
    """
    try:
        result = verify_proof_payload(payload_file, oracle=ctx.obj.get("oracle"))
    except LineageProofError as e:
        _fail(e)

    table = Table(title="Payload Verification")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Leaf Index", str(result.leaf_index))
    table.add_row("Leaf", result.leaf)
    table.add_row("Presented Root", result.presented_root)
    table.add_row("Computed Root", result.computed_root)
    console.print(table)

    if result.valid:
        console.print("[green]✅ Proof is valid[/green]")
    else:
        console.print("[red]❌ Proof does not match the presented root[/red]")
        sys.exit(1)


@cli.command()
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--family", type=click.Choice(sorted(FAMILIES)), envvar="RECORD_FAMILY", help="Entity family of the records")
@click.option("--no-root", is_flag=True, help="Skip computing the Merkle root")
@click.pass_context
def inspect(ctx, records_file: str, family: Optional[str], no_root: bool):
    """Inspect a record export: counts, excluded records and the current root."""
    try:
        summary = inspect_records(records_file, family=family, oracle=ctx.obj.get("oracle"), with_root=not no_root)
    except LineageProofError as e:
        _fail(e)

    table = Table(title="Record Set Summary")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Family", summary.family)
    table.add_row("Groups", str(summary.node_count))
    table.add_row("Records", str(summary.record_count))
    table.add_row("Leaf Records", str(summary.leaf_count))
    table.add_row("Excluded", str(summary.excluded_count))
    table.add_row("Tree Capacity", str(summary.capacity))
    table.add_row("Merkle Root", summary.root or "-")
    console.print(table)

    if summary.leaf_count > summary.capacity:
        console.print("[red]The committed set exceeds the tree capacity; proofs cannot be built.[/red]")


@cli.command()
@click.pass_context
def health(ctx):
    """Check the hash oracle and proving service."""
    console.print("[cyan]Checking collaborator health...[/cyan]")

    try:
        oracle = create_oracle(ctx.obj.get("oracle"))
    except LineageProofError as e:
        _fail(e)

    oracle_ok = oracle.health_check()

    proving_ok = None
    proving_url = get_settings().zkp_service_url
    if proving_url:
        proving_ok = ProvingServiceClient(proving_url).health_check()

    status = HealthResponse(
        status="ok" if oracle_ok and proving_ok is not False else "degraded",
        hash_oracle=oracle_ok,
        proving_service=proving_ok,
        oracle_name=oracle.name,
        circuit_compatible=oracle.circuit_compatible,
        version=__version__,
    )

    table = Table(title="Health Check")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")
    table.add_row(
        "Hash Oracle",
        "✅ Healthy" if status.hash_oracle else "❌ Unhealthy",
        f"{status.oracle_name} (circuit compatible: {status.circuit_compatible})",
    )
    if status.proving_service is None:
        table.add_row("Proving Service", "➖ Not configured", "Set ZKP_SERVICE_URL")
    else:
        table.add_row(
            "Proving Service", "✅ Healthy" if status.proving_service else "❌ Unhealthy", proving_url
        )
    console.print(table)

    if status.status != "ok":
        sys.exit(1)


if __name__ == "__main__":
    cli()
