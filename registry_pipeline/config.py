# registry_pipeline/config.py
#
# Pipeline configuration loaded from environment variables.
#
# Design decisions:
#   - Frozen dataclass (not pydantic Settings): the pipeline is a standalone
#     offline process and pydantic stays in the API layer.
#   - Paths default to registry_pipeline/data relative to this file so the
#     pipeline runs out of the box after a fresh checkout.
#   - The registry exports are dropped by the operator into input_dir. There
#     is nothing to download.
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_PIPELINE_DIR = Path(__file__).parent


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable pipeline configuration.

    Invariant: data_dir and duckdb_output_path are Path objects; every
    derived directory lives under data_dir.
    """

    data_dir: Path
    duckdb_output_path: Path
    csv_separator: str = ";"

    @property
    def input_dir(self) -> Path:
        """Directory holding companies.csv and shareholders.csv."""
        return self.data_dir / "input"

    @property
    def staging_dir(self) -> Path:
        """Directory for cleaned and recomputed Parquet staging files."""
        return self.data_dir / "staging"

    @property
    def output_dir(self) -> Path:
        return self.data_dir / "output"


def load_config() -> PipelineConfig:
    """Build PipelineConfig from PIPELINE_DATA_DIR / DUCKDB_OUTPUT_PATH / PIPELINE_CSV_SEPARATOR."""
    data_dir = Path(os.environ.get("PIPELINE_DATA_DIR", str(_PIPELINE_DIR / "data")))
    duckdb_output_path = Path(
        os.environ.get("DUCKDB_OUTPUT_PATH", str(data_dir / "output" / "registry.duckdb"))
    )
    separator = os.environ.get("PIPELINE_CSV_SEPARATOR", ";")
    if len(separator) != 1:
        raise ValueError(f"PIPELINE_CSV_SEPARATOR must be a single character, got {separator!r}")
    return PipelineConfig(
        data_dir=data_dir,
        duckdb_output_path=duckdb_output_path,
        csv_separator=separator,
    )
