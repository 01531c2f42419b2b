"""UI utilities: logging setup, date parsing and input prompts."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union, get_args, get_origin

import pandas as pd
from pydantic import BaseModel
from pydantic_core import PydanticUndefined


GREEN = "\033[92m"
RED = "\033[91m"
CYAN = "\033[96m"
BOLD = "\033[1m"
RESET = "\033[0m"


def setup_file_logging(log_file: Path) -> None:
    """Configure file-only logging for the CLI."""
    log_file.touch(exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.FileHandler(log_file, encoding="utf-8")],
        force=True,
    )


def parse_date_flexible(s: str) -> date:
    s = s.strip()
    fmts = [
        "%d/%m/%Y",
        "%d-%m-%Y",
        "%d.%m.%Y",
        "%Y-%m-%d",
    ]
    for f in fmts:
        try:
            return datetime.strptime(s, f).date()
        except ValueError:
            continue
    raise ValueError(f"Unsupported date format: {s}")


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def prompt_for_model(model: Type[BaseModel]) -> BaseModel:
    """Prompt user for fields of a Pydantic model and return an instance.

    Parameters
    ----------
    model : Type[BaseModel]
        The Pydantic model class describing the required inputs.

    Returns
    -------
    BaseModel
        An instance populated from user input.
    """
    values: Dict[str, Any] = {}
    for name, field in model.model_fields.items():
        desc = field.description or name
        has_default = field.default is not PydanticUndefined or field.default_factory is not None
        default_repr = f" (default: {field.get_default(call_default_factory=True)})" if has_default else ""
        raw = input(f"{desc}{default_repr}: ").strip()
        if raw == "" and has_default:
            continue
        anno = _unwrap_optional(field.annotation)
        if anno is bool:
            values[name] = raw.lower() in {"y", "yes", "true", "1"}
        elif anno is int:
            values[name] = int(raw)
        elif anno is date:
            values[name] = parse_date_flexible(raw)
        elif anno is Path:
            values[name] = Path(raw).expanduser().resolve()
        else:
            values[name] = raw
    return model(**values)


def flatten(prefix: str, obj: Any, out: Dict[str, Any]) -> None:
    if isinstance(obj, dict):
        for k, v in obj.items():
            key = f"{prefix}.{k}" if prefix else str(k)
            flatten(key, v, out)
    elif isinstance(obj, list):
        out[prefix] = json.dumps(obj, ensure_ascii=False)
    else:
        out[prefix] = obj


def convert_json_folder_to_csv(folder: Path, out_csv: Path, id_column: Optional[str] = "id") -> int:
    """Merge every ``*.json`` record of ``folder`` into one CSV file.

    Parameters
    ----------
    folder : Path
        A record-store table directory.
    out_csv : Path
        Destination CSV file.
    id_column : Optional[str], default="id"
        Column receiving the record id (file stem); ``None`` to omit it.

    Returns
    -------
    int
        Number of records written.
    """
    if not folder.exists() or not folder.is_dir():
        raise FileNotFoundError(f"Folder not found or not a directory: {folder}")
    rows = []
    files = sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".json")
    for fp in files:
        try:
            data = json.loads(fp.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logging.exception("Skipping unreadable record %s", fp)
            continue
        flat: Dict[str, Any] = {}
        flatten("", data, flat)
        if id_column:
            flat[id_column] = fp.stem
        rows.append(flat)

    out_csv.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        pd.DataFrame(columns=[id_column] if id_column else []).to_csv(out_csv, index=False)
        return 0
    df = pd.DataFrame(rows)
    if id_column:
        df = df[[id_column] + [c for c in df.columns if c != id_column]]
    df.to_csv(out_csv, index=False)
    return len(rows)
