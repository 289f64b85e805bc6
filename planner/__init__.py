"""Content planner.

This package contains the FastAPI service backing a personal content
production planner (notes, tasks, video projects, production checklist,
schedule) and ``planner.client``, the headless state layer that drives it.
"""

from planner.models import Base

__all__ = ["Base"]
