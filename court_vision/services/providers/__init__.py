"""
External data provider clients (ESPN, BallDontLie).
"""

from court_vision.services.providers.errors import ProviderError
from court_vision.services.providers.espn_service import ESPNApiService
from court_vision.services.providers.balldontlie_service import BallDontLieService

__all__ = ["ProviderError", "ESPNApiService", "BallDontLieService"]
