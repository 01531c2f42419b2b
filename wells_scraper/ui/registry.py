"""Dynamic scraper registry keyed by (region, source)."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple, Type
import importlib
import inspect
import logging
import pkgutil

from wells_scraper.scrapers.base.records_scraper import RecordsBaseScraper


_REGISTRY: Dict[Tuple[str, str], Type[RecordsBaseScraper]] = {}

REGIONS_PACKAGE = "wells_scraper.scrapers.regions"


def _normalize_token(value: str) -> str:
    return value.lower().strip().replace(" ", "_").replace("-", "_")


def _register_from_module(module: Any, region_token: str, source_token: str) -> None:
    module_name = getattr(module, "__name__", "")
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if getattr(obj, "__module__", None) != module_name:
            continue
        if issubclass(obj, RecordsBaseScraper) and not inspect.isabstract(obj):
            _REGISTRY.setdefault((region_token, source_token), obj)


def _ensure_loaded() -> None:
    if _REGISTRY:
        return
    regions_pkg = importlib.import_module(REGIONS_PACKAGE)
    for modinfo in pkgutil.walk_packages(regions_pkg.__path__, prefix=f"{REGIONS_PACKAGE}."):
        if modinfo.ispkg:
            continue
        name = modinfo.name
        try:
            module = importlib.import_module(name)
        except Exception:
            logging.exception("Failed to import module during discovery: %s", name)
            continue
        parts = name.split(".")
        region_token = parts[-2].lower()
        source_token = parts[-1].lower()
        _register_from_module(module, region_token, source_token)


def available_scrapers() -> List[Tuple[str, str]]:
    """Return the registered ``(region, source)`` keys, sorted."""
    _ensure_loaded()
    return sorted(_REGISTRY)


def select_scraper(region: str, source: str) -> RecordsBaseScraper:
    """Instantiate the scraper registered for ``region``/``source``.

    Raises
    ------
    ValueError
        If no scraper is registered under that key.
    """
    _ensure_loaded()
    cls = _REGISTRY.get((_normalize_token(region), _normalize_token(source)))
    if cls is None:
        msg = f"No scraper available for region={region!r}, source={source!r}."
        logging.error(msg)
        raise ValueError(msg)
    return cls()
