"""Background workers"""
from .overdue_advancer import OverdueAdvancerWorker

__all__ = ["OverdueAdvancerWorker"]
