
from .sample_id import (
    SampleId,
    FormatError,
    is_constructed_strain,
    format_time
)

from .mean_computer import (
    mean_registry,
    get_mean_computer
)

from .growth_data import (
    GrowthData
)

from .choices import (
    ChoiceTracker,
    read_choices,
    SampleFormatter
)
