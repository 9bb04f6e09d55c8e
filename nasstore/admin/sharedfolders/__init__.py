"""
Shared folder mount units.
"""
from . import routes  # noqa
