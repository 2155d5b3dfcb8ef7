"""Write generated artifacts under the configured output directory."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from sketchstack.utils.config import settings
from sketchstack.utils.file_utils import ensure_dir


def _target(name: str, output_dir: Optional[str]) -> Path:
    return ensure_dir(output_dir or settings.output_dir) / name


def save_json(name: str, payload: Dict[str, Any], output_dir: Optional[str] = None) -> str:
    path = _target(name, output_dir)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return str(path)


def save_text(name: str, text: str, output_dir: Optional[str] = None) -> str:
    path = _target(name, output_dir)
    path.write_text(text, encoding="utf-8")
    return str(path)
