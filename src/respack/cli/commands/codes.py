"""List the packager error signature table."""

from __future__ import annotations

import sys
from typing import Annotated

from cyclopts import Parameter
from rich.console import Console
from rich.table import Table

from respack.packager.signatures import FALLBACK_CODE, lookup_error_code, search_signatures
from respack.serde_msgspec import write_json


def codes_command(
    *,
    search: Annotated[
        str | None,
        Parameter(name=["--search", "-s"], help="Only show rows whose text or code contains this."),
    ] = None,
    lookup: Annotated[
        str | None,
        Parameter(name="--lookup", help="Print the code assigned to one diagnostic message."),
    ] = None,
    json_output: Annotated[
        bool,
        Parameter(name="--json", help="Write rows as JSON."),
    ] = False,
) -> int:
    """Show the signatures used to code packager diagnostics.

    Returns
    -------
    int
        Exit status code.
    """
    if lookup is not None:
        sys.stdout.write(lookup_error_code(lookup) + "\n")
        return 0
    rows = search_signatures(search)
    if json_output:
        payload = [{"substring": row.substring, "code": row.code} for row in rows]
        write_json(payload)
        return 0
    table = Table(title="Packager error signatures", caption=f"Unmatched messages use {FALLBACK_CODE}.")
    table.add_column("#", justify="right")
    table.add_column("Code")
    table.add_column("Substring", overflow="fold")
    for index, row in enumerate(rows, start=1):
        table.add_row(str(index), row.code, row.substring)
    Console().print(table)
    return 0


__all__ = ["codes_command"]
