"""
Disk management: block device identity lookups.
"""
from . import routes  # noqa
