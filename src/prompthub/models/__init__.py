"""SQLAlchemy models. Import all models here so metadata discovers them."""

from prompthub.models.auth_token import AuthToken
from prompthub.models.base import Base
from prompthub.models.group import Group, Subgroup
from prompthub.models.llm_config import LLMConfiguration, ProviderType
from prompthub.models.prompt import Favorite, Prompt
from prompthub.models.run_log import RunLog, RunStatus
from prompthub.models.user import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "AuthToken",
    "Group",
    "Subgroup",
    "Prompt",
    "Favorite",
    "LLMConfiguration",
    "ProviderType",
    "RunLog",
    "RunStatus",
]
