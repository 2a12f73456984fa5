"""Group ride planner: preference aggregation and route synthesis."""

__version__ = "0.1.0"
