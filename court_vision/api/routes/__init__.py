"""
API routes.

This module organizes routes into:
- games, players, teams: synced provider data
- tags, plays: the tagging surface
- analytics: pattern, suggestion, decision-quality and scouting endpoints
- sync: sync status, run history and manual triggers
"""
