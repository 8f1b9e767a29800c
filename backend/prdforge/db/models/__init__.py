"""Re-export all models so Base.metadata sees them."""

from prdforge.db.models.artifact import Artifact
from prdforge.db.models.artifact_version import ArtifactVersion
from prdforge.db.models.generation_event import GenerationEvent
from prdforge.db.models.template import Template

__all__ = [
    "Artifact",
    "ArtifactVersion",
    "GenerationEvent",
    "Template",
]
