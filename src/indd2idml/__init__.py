"""Batch conversion of InDesign documents to IDML."""

__version__ = "0.1.0"

from .config import AppConfig, RunConfig, RunMode, load_config
from .core import ConversionPipeline
from .logging import LogLevel, RunLogger
from .models import ConversionResult, ConversionStatus, FileRef, RunReport
from .orchestrator import BatchOrchestrator
from .walker import walk

__all__ = [
    "AppConfig",
    "BatchOrchestrator",
    "ConversionPipeline",
    "ConversionResult",
    "ConversionStatus",
    "FileRef",
    "LogLevel",
    "RunConfig",
    "RunLogger",
    "RunMode",
    "RunReport",
    "load_config",
    "walk",
]
