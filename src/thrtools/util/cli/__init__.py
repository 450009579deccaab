
from .generalized_main import (
    generalized_main
)

from .dispatch_main import (
    dispatch_main
)
