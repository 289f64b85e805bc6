"""HTTP routes for the planner API."""
