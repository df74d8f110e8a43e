"""SimRec: similar-items recommendation from implicit view events.

This package trains item latent-feature models from user view events and
answers "items similar to these" queries with filtering and top-N ranking.

Modules:
    simrec: Training, model, scoring, ranking and prediction logic
"""

__version__ = "0.1.0"
