"""
Shared helpers for CLI commands: exit codes, recipient file loading and
store construction.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.schemas.distribution import Recipient
from core.schemas.errors import AirdropException
from orchestrator.storage import DistributionStore, FileStore, create_store

from airdrop_cli.config import CLIConfig


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


class RecipientFileError(Exception):
    """Recipient file could not be parsed."""
    pass


def _parse_rows(rows: list[Any], source: Path) -> list[Recipient]:
    recipients = []
    for line, row in enumerate(rows, start=1):
        if not isinstance(row, dict):
            raise RecipientFileError(f"{source}: entry {line} is not an object")
        try:
            recipients.append(Recipient(address=row.get("address"), amount=row.get("amount")))
        except (ValidationError, ValueError, AirdropException) as e:
            raise RecipientFileError(f"{source}: entry {line}: {e}") from e
    return recipients


def load_recipients(path: str | Path) -> list[Recipient]:
    """
    Load an ordered recipient list.

    Accepted formats:
    - CSV with an "address,amount" header row
    - JSON list of {"address", "amount"} objects
    - JSON object with a "recipients" list (a stored record document)

    Amounts should be integers or decimal strings; floats are refused.
    """
    path = Path(path)
    if not path.exists():
        raise RecipientFileError(f"Recipient file not found: {path}")

    if path.suffix.lower() == ".csv":
        with open(path, newline="") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None or not {"address", "amount"} <= set(reader.fieldnames):
                raise RecipientFileError(f"{path}: CSV needs 'address' and 'amount' columns")
            rows: list[Any] = []
            for r in reader:
                if r["address"] is None or r["amount"] is None:
                    raise RecipientFileError(
                        f"{path}: line {reader.line_num}: missing address or amount"
                    )
                rows.append({"address": r["address"].strip(), "amount": r["amount"].strip()})
    else:
        try:
            with open(path) as f:
                data = json.load(f, parse_float=_refuse_float)
        except (json.JSONDecodeError, ValueError) as e:
            raise RecipientFileError(f"{path}: {e}") from e
        rows = data.get("recipients", []) if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise RecipientFileError(f"{path}: expected a list of recipients")

    return _parse_rows(rows, path)


def _refuse_float(text: str) -> Any:
    raise ValueError(f"non-integer amount {text}")


def open_store(config: CLIConfig) -> DistributionStore:
    """Build the distribution store described by the CLI config."""
    runtime = config.to_runtime_config()
    if runtime.storage.backend == "file":
        backend = FileStore(Path(runtime.storage.directory).expanduser())
    else:
        backend = create_store(runtime.storage)
    return DistributionStore(backend, key_prefix=runtime.storage.key_prefix)
