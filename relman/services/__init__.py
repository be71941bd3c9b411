"""Release services: building, packaging and publishing targets.

Services implement the release flow on top of the domain layer (core/) and
the platform layer (platform/).
"""

from relman.services.release import ReleaseOrchestrator, ReleaseReport, ReleaseRequest

__all__ = [
    "ReleaseOrchestrator",
    "ReleaseReport",
    "ReleaseRequest",
]
