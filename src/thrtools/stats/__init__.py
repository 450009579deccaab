
from .pred_prod import (
    PredProd
)

from .prediction_analyzer import (
    ConfusionMatrix,
    PredictionAnalyzer
)

from .strain_analyzer import (
    StrainAnalyzer
)

from .roc import (
    roc_points,
    trapezoid_auc,
    compute_auc
)

from .correlation import (
    pearson
)
