# -*- coding: utf-8 -*
"""Multiple dispatch with CLOS-style method combination for Python.

See ``dir(closdispatch)`` and submodule docstrings for more. Start from
``closdispatch.dispatch``.
"""

__version__ = '0.1.0'

from .typechain import *  # noqa: F401, F403
from .table import *  # noqa: F401, F403
from .policy import *  # noqa: F401, F403
from .resolver import *  # noqa: F401, F403
from .combine import *  # noqa: F401, F403
from .dispatch import *  # noqa: F401, F403
