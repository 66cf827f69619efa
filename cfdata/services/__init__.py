"""Workflow services."""

from .generator import ContentGenerator
from .models import CreatedItems, SetupResult, TeardownResult
from .setup_workflow import SetupWorkflow
from .teardown_workflow import TeardownWorkflow

__all__ = [
    "ContentGenerator",
    "CreatedItems",
    "SetupResult",
    "SetupWorkflow",
    "TeardownResult",
    "TeardownWorkflow",
]
