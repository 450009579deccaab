
from .read_table import (
    read_table
)

from .read_yaml import (
    read_yaml
)

from .write_workbook import (
    write_workbook
)
