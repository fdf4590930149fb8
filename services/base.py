"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager


class Services:
    """Container for all application services.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, the
            database settings in config are ignored.
    """

    def __init__(self, config: Config, db_manager=None):
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.category_limits import CategoryLimitService
        from services.recurring_rules import RecurringRuleService
        from services.transactions import TransactionService

        self.category_limits = CategoryLimitService(self.db_manager)
        self.recurring_rules = RecurringRuleService(self.db_manager)
        self.transactions = TransactionService(self.db_manager)
