"""Report generation module."""
from .models import OfferReport
from .builder import ReportBuilder, ReportFormat

__all__ = [
    'OfferReport',
    'ReportBuilder',
    'ReportFormat',
]
