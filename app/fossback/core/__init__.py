"""Core run orchestration: paths, settings, run context, and checkout lifecycle."""
