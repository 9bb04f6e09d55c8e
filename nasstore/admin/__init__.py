"""
Admin functionality blueprint.
"""
from flask import Blueprint

bp = Blueprint('admin', __name__)

from . import routes  # noqa
from . import diskman  # noqa
from . import sharedfolders  # noqa
