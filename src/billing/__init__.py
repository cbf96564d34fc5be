from src.billing.limits import UsageLimitService
from src.billing.repository.read_models import SqlUsageReadModel


def get_usage_limit_service() -> UsageLimitService:
    return UsageLimitService(SqlUsageReadModel())


__all__ = [
    "UsageLimitService",
    "get_usage_limit_service",
]
