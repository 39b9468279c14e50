from __future__ import annotations

from typing import Callable, Dict

from ..config import AppConfig
from .base import (
    DocumentHandle,
    DocumentService,
    ExportFormat,
    Reference,
    ReferenceState,
    ServiceError,
    ServiceUnavailableError,
)
from .indesign import InDesignService

_SERVICE_FACTORIES: Dict[str, Callable[[AppConfig], DocumentService]] = {
    "indesign": lambda config: InDesignService(config.indesign),
}


def create_service(config: AppConfig, name: str = "indesign") -> DocumentService:
    factory = _SERVICE_FACTORIES.get(name)
    if not factory:
        raise KeyError(f"No document service registered for {name}")
    return factory(config)


__all__ = [
    "DocumentHandle",
    "DocumentService",
    "ExportFormat",
    "InDesignService",
    "Reference",
    "ReferenceState",
    "ServiceError",
    "ServiceUnavailableError",
    "create_service",
]
