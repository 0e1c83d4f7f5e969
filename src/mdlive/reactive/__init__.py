"""Reactive layer — change propagation from file edit to browser reload.

Connects watcher events to the content store and fans reload signals out
to every connected viewer.
"""

from mdlive.reactive.broadcaster import RELOAD, Broadcaster, Subscriber
from mdlive.reactive.pipeline import RevisionPipeline

__all__ = [
    "RELOAD",
    "Broadcaster",
    "RevisionPipeline",
    "Subscriber",
]
