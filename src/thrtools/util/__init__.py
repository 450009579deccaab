
from .validation import (
    check_number,
    check_cutoffs,
    parse_flag,
    parse_float
)

from .dataframe import (
    check_columns,
    MissingColumnError
)

from .io import (
    read_table,
    read_yaml,
    write_workbook
)

from .cli import (
    generalized_main,
    dispatch_main
)
