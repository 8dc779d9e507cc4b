"""Portal statistics package initialization.

Exports for testing and module access.
"""

# Make lib and models accessible
from portal_stats import lib, models

__all__ = ['lib', 'models']
