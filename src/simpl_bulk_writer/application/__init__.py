"""Application layer: job planning and task execution."""
