"""数据访问层模块"""

from age_guard.repositories.account_repository import AccountRepository
from age_guard.repositories.base import BaseRepository, persistence_errors
from age_guard.repositories.consent_repository import ConsentTokenRepository
from age_guard.repositories.restriction_repository import RestrictionRepository
from age_guard.repositories.session_repository import SessionRepository
from age_guard.repositories.spending_repository import SpendingRepository

__all__ = [
    "BaseRepository",
    "persistence_errors",
    "AccountRepository",
    "ConsentTokenRepository",
    "RestrictionRepository",
    "SessionRepository",
    "SpendingRepository",
]
