"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """Caller supplied an invalid or incomplete configuration"""

    pass


class PlannerConfigurationError(ConfigurationError):
    """Debt planner settings are missing or inconsistent"""

    pass


class ForecastConfigurationError(ConfigurationError):
    """Unknown scenario, unsupported horizon or bad assumption override"""

    pass


class InsufficientDataError(DomainException):
    """Not enough financial data to produce a result"""

    pass


class NoLoansError(InsufficientDataError):
    """Debt plan requested for a user with no loans"""

    pass


class RecommendationNotFoundError(DomainException):
    """Recommendation does not exist or belongs to another user"""

    pass


class InvalidTransitionError(DomainException):
    """Recommendation status change not allowed from its current state"""

    pass


class PortfolioAPIError(DomainException):
    """Portfolio API returned an error or is unavailable"""

    pass
