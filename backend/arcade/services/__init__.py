"""Arcade domain services: accounts, tokens, scores and rankings.

Each service is constructed with the store session it should use, so HTTP
routes, CLI commands and tests can hand in whichever session they own.
"""

from .auth import AuthService
from .scores import ScoreService
from .leaderboard import LeaderboardQuery

__all__ = ['AuthService', 'ScoreService', 'LeaderboardQuery']
