"""
thrtools package initialization.

Utilities for reconciling threonine production experiments and scoring the
models used to design them.
"""

from . import util
from . import data
from . import samples
from . import stats
from . import runs
from . import process

from .samples import (
    SampleId,
    FormatError
)
