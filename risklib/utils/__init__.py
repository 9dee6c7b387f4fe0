"""
Utility modules
"""

from .helpers import create_rich_table, format_number, format_percentage, format_table
from .logging_config import RiskLibLogger, get_logger, setup_logging
from .sample_data import create_sample_returns

__all__ = [
    'format_percentage', 'format_number', 'format_table', 'create_rich_table',
    'RiskLibLogger', 'get_logger', 'setup_logging',
    'create_sample_returns',
]
