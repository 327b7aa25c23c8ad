"""Storage services for the planner collections."""
