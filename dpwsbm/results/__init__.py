"""Chain result persistence and run identifiers."""

from dpwsbm.results.run_id import generate_run_id
from dpwsbm.results.storage import (
    load_chain_result,
    save_chain_result,
    validate_metadata,
)

__all__ = [
    "generate_run_id",
    "load_chain_result",
    "save_chain_result",
    "validate_metadata",
]
