"""
Services module for Court Vision business logic.

This module organizes services into:
- providers: ESPN and BallDontLie API clients
- sync: provider-to-store sync jobs and their orchestrator
- tagging: tag taxonomy, quick actions and play creation
- analytics: read-time aggregations over tagged plays
- ai: narrative game analysis with a deterministic fallback
"""
