from pathlib import Path

import ingestion.csv_format as csv_format
import ingestion.json_format as json_format

_INGESTION_MODULES = {
    "csv": csv_format,
    "json": json_format,
}


def get_ingestion_module(module_name: str):
    """Get an ingestion module by format name."""
    if module_name not in _INGESTION_MODULES:
        raise ValueError(f"Unknown ingestion module: {module_name}")
    return _INGESTION_MODULES[module_name]


def get_module_for_path(path) -> object:
    """Pick the ingestion module from a file's extension. Anything but .csv is JSON."""
    suffix = Path(path).suffix.lower()
    return csv_format if suffix == ".csv" else json_format


def get_available_modules():
    """Get list of available ingestion modules."""
    return list(_INGESTION_MODULES.keys())
