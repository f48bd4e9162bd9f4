import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    store_path: str = "data/state.json"
    catalog_seed: Optional[int] = None
    first_year: int = 2012
    last_year: int = 2025
    taxonomy_path: Optional[str] = None
    page_title: str = "Car Parts Store"
    currency: str = "JMD"


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Defaults, overridden by the keys of a JSON object at path.
    A missing file means defaults; unknown keys are ignored.
    """
    settings = Settings()
    if path is None or not Path(path).exists():
        return settings

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
    return replace(settings, **{k: v for k, v in data.items() if k in known})
