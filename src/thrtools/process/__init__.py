
from .thr_fix import (
    thr_fix,
    check_thresholds
)

from .big_run import (
    big_run,
    BigRunStats,
    parse_raw_productions
)
