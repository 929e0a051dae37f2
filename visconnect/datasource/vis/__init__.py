"""
FIVB VIS data source for tournaments and matches.
"""

from visconnect.datasource.vis.query import VisQuery
from visconnect.datasource.vis.source import VisSource

__all__ = ["VisQuery", "VisSource"]
