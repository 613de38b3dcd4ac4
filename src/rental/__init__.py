"""
Rental assistance need estimation for New York State.

Simulates job loss and unemployment insurance takeup over ACS microdata to
estimate emergency rental assistance need by locality and a fair allocation
of program funds.
"""

from .industry import classify_industries, ind_to_bls
from .report import format_table, summary_table, summary_tables
from .sim import SimulationConfig, SimulationRunner, run_simulation

__all__ = [
    'SimulationConfig',
    'SimulationRunner',
    'classify_industries',
    'format_table',
    'ind_to_bls',
    'run_simulation',
    'summary_table',
    'summary_tables',
]

# Version information
__version__ = '0.1.0'
