"""Pipeline orchestration"""

from .pipeline import DiscountPipeline

__all__ = ["DiscountPipeline"]
