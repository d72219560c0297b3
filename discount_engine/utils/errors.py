"""Custom exceptions for the discount engine"""


class DiscountEngineError(Exception):
    """Base exception for discount engine errors"""
    pass


class ConfigurationError(DiscountEngineError):
    """Configuration loading errors"""
    pass


class IngestionError(DiscountEngineError):
    """Order source unreadable or a record could not be parsed"""
    pass


class RuleEvaluationError(DiscountEngineError):
    """A discount rule raised while scoring an order"""
    pass


class PersistError(DiscountEngineError):
    """Per-record failure writing to the orders table"""
    pass


class DatabaseConnectionError(DiscountEngineError):
    """Database unreachable"""
    pass
