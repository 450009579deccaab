
from .pred_prod import PredProd
from .prediction_analyzer import PredictionAnalyzer


class StrainAnalyzer:
    """
    Rolls prediction/production pairs up to the strain level. For each strain
    (SampleId.to_strain) it keeps the highest prediction and the highest
    production seen for any of its samples.
    """

    def __init__(self):
        self.strain_map = {}

    def add(self, sample, prediction, production):

        strain = sample.to_strain()
        pair = self.strain_map.get(strain)
        if pair is None:
            self.strain_map[strain] = PredProd(prediction, production)
            return

        if prediction > pair.prediction:
            pair.prediction = float(prediction)
        if production > pair.production:
            pair.production = float(production)

    def __len__(self):
        return len(self.strain_map)

    def to_analyzer(self):
        """PredictionAnalyzer holding one pair per strain"""
        return PredictionAnalyzer(self.strain_map.values())
