from __future__ import annotations

import re
from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, Field, field_validator

_REFERENCE = re.compile(
    r"^[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*(:[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*)?$"
)


class RunConfig(BaseModel):
    """What to run and where to write results.

    ``containers`` are import references: ``package.module`` for a module of
    marked test functions, ``package.module:Name`` for a test class or a
    ``TestRegistry`` attribute.
    """

    model_config = ConfigDict(extra="forbid")

    containers: list[str]
    output_dir: str = "runs"
    name_filter: str | None = None
    parallel: int = Field(default=1, ge=1, le=100)
    verbose: bool = False

    @field_validator("containers")
    @classmethod
    def containers_must_be_references(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("containers must not be empty")
        for reference in v:
            if not _REFERENCE.match(reference):
                raise ValueError(
                    f"Container reference '{reference}' must look like "
                    "'package.module' or 'package.module:Name'"
                )
        return v

    @field_validator("output_dir")
    @classmethod
    def expand_output_dir(cls, v: str) -> str:
        """Expand ${VAR} and ${VAR:-default} references."""
        try:
            return expandvars(v, nounset=True)
        except Exception as e:
            raise ValueError(f"output_dir '{v}' references an unset variable: {e}") from e


def load_config(path: Path) -> RunConfig:
    """Load and validate a run config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = RunConfig(**raw)

    # Resolve a relative output_dir relative to the config file location
    output_path = Path(config.output_dir)
    if not output_path.is_absolute():
        config.output_dir = str((config_dir / output_path).resolve())

    return config
