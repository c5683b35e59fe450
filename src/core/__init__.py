"""Build planner core: catalog, stat aggregation, optimizers and planners."""

__version__ = "0.1.0"
