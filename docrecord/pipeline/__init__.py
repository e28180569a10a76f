"""
Pipeline Module.

Job definition, collaborator protocols and the extraction orchestrator.
"""

from .collaborators import StaticCredentialResolver, Utf8TextSource
from .job import MODE_HEURISTIC, MODE_MODEL_ASSISTED, ExtractionJob
from .orchestrator import ExtractionOrchestrator, ExtractionOutcome

__all__ = [
    'StaticCredentialResolver',
    'Utf8TextSource',
    'MODE_HEURISTIC',
    'MODE_MODEL_ASSISTED',
    'ExtractionJob',
    'ExtractionOrchestrator',
    'ExtractionOutcome',
]
