
from .check import (
    check_number,
    check_cutoffs,
    parse_flag,
    parse_float
)
