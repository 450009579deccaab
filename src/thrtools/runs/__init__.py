
from .run_descriptor import (
    RunDescriptor,
    to_chromosome,
    read_prediction_file
)

from .run_control import (
    read_run_control,
    find_run,
    attribute_origins,
    load_predictions
)
