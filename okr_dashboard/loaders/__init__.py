"""Data ingestion loaders for dashboard export workbooks."""

from .workbook import load_customers, load_owners, load_scores
from .workbook import load_workbook_records

__all__ = [
    "load_owners",
    "load_customers",
    "load_scores",
    "load_workbook_records",
]
