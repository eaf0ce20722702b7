import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import yaml

from shelfwise.schemas import (
    DIRECTIVE_CSV_FIELDS,
    REPORT_CSV_FIELDS,
    BatchReport,
    Directive,
    ShelfConfig,
)
from shelfwise.store.memory import InMemoryStore

CONFIG_FILENAME = "shelf.yaml"
REQUIRED_DIRECTIVE_COLUMNS = ("reference", "database", "destination")


def ensure_state_dir(config: ShelfConfig) -> Path:
    state_dir = config.resolved_state_dir
    state_dir.mkdir(parents=True, exist_ok=True)
    return state_dir


# ============================================================================
# LIBRARY SNAPSHOT
# ============================================================================

def load_library(path: Path) -> InMemoryStore:
    if not path.exists():
        raise FileNotFoundError(f"Library not found: {path} (run 'shelf init' first)")
    with path.open("r", encoding="utf-8") as f:
        return InMemoryStore.from_snapshot(json.load(f))


def save_library(store: InMemoryStore, path: Path) -> Path:
    """
    Write the library snapshot (see store/memory.py for the format).
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store.to_snapshot(), f, indent=2, ensure_ascii=False)
    return path


# ============================================================================
# DIRECTIVES
# ============================================================================

def load_directives(source: str) -> List[Any]:
    """
    Load a JSON array of directives.

    source is "-" for stdin, a path to a JSON file, or the JSON text itself.
    Items are returned as parsed; malformed items are reported per
    directive by the orchestrator.
    """
    if source == "-":
        text = sys.stdin.read()
    elif not source.lstrip().startswith("[") and Path(source).is_file():
        text = Path(source).read_text(encoding="utf-8")
    else:
        text = source

    try:
        items = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON input: {e}")

    if not isinstance(items, list):
        raise ValueError("Input must be a JSON array")
    return items


def load_directives_csv(path: Path, create_missing_default: bool = True) -> List[Directive]:
    """
    Load directives from a CSV file with columns:

        reference,database,destination,create_missing,rename,tags,comment,metadata,replicate

    Only reference, database and destination are required. Empty cells mean
    "not present"; tags are separated by semicolons; metadata is a JSON object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Directive CSV not found at: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    missing = [c for c in REQUIRED_DIRECTIVE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Directive CSV missing required column(s): {', '.join(missing)}")

    unknown = [c for c in df.columns if c not in DIRECTIVE_CSV_FIELDS]
    if unknown:
        print(f"[shelf] ignoring unknown CSV column(s): {', '.join(unknown)}", file=sys.stderr)

    directives = []
    for row in df.to_dict(orient="records"):
        try:
            directives.append(Directive.from_csv_row(row, create_missing_default))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid metadata JSON for {row.get('reference')}: {e}")
    return directives


def write_report_csv(report: BatchReport, path: Path) -> Path:
    """Write one row per directive: successes first, then errors."""
    rows = [r.to_csv_row() for r in report.results] + [e.to_csv_row() for e in report.errors]
    df = pd.DataFrame(rows, columns=REPORT_CSV_FIELDS)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    print(f"[shelf] wrote batch report -> {path} ({len(rows)} rows)", file=sys.stderr)
    return path


# ============================================================================
# CONFIGURATION
# ============================================================================

def find_config(library_path: Optional[Path] = None) -> Optional[Path]:
    """Look for shelf.yaml next to the library first, then in the working directory."""
    candidates = []
    if library_path is not None:
        candidates.append(library_path.parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Optional[Path] = None) -> ShelfConfig:
    """
    Load configuration from a YAML (or .json) file.

    Missing file gives defaults; unknown keys are ignored.

        library: ~/Shelf/library.json
        state_dir: ~/Shelf/.shelf
        default_database: Research
        create_missing: true
        journal: true
        pretty: false
    """
    config = ShelfConfig()
    if config_path is None or not config_path.exists():
        return config

    with config_path.open("r", encoding="utf-8") as f:
        if config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid config file {config_path}: {e}")

    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return _apply_config(config, data, base_dir=config_path.parent)


def _apply_config(config: ShelfConfig, data: Dict[str, Any], base_dir: Path) -> ShelfConfig:
    def as_path(value: str) -> Path:
        p = Path(value).expanduser()
        return p if p.is_absolute() else base_dir / p

    if data.get("library"):
        config.library_path = as_path(data["library"])
    if data.get("state_dir"):
        config.state_dir = as_path(data["state_dir"])
    if data.get("default_database"):
        config.default_database = str(data["default_database"])
    if "create_missing" in data:
        config.create_missing = bool(data["create_missing"])
    if "journal" in data:
        config.journal = bool(data["journal"])
    if "pretty" in data:
        config.pretty = bool(data["pretty"])
    return config
