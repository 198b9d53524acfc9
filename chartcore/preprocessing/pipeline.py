"""Five-stage preprocessing pipeline."""

import logging
from typing import Sequence

from ..models.config import PreprocessingConfig
from ..models.series import LinePoint, NumericSeries
from .stages import (
    apply_differencing, apply_missing_values, apply_outliers, apply_scaling, apply_smoothing
)

logger = logging.getLogger(__name__)


def apply_preprocessing(series: Sequence[LinePoint], config: PreprocessingConfig = None) -> NumericSeries:
    """
    Run the enabled stages in their fixed order.

    missing values -> outliers -> smoothing -> differencing -> scaling.
    Later stages see the already imputed and clipped values.

    Args:
        series: Input line series
        config: Pipeline config (defaults when None)

    Returns:
        New series; the input unchanged (copied) when the pipeline is disabled
    """
    config = config or PreprocessingConfig()
    if not config.enabled:
        return list(series)

    result = list(series)
    stages = []

    if config.missing_values.enabled:
        result = apply_missing_values(result, config.missing_values)
        stages.append('missing_values')

    if config.outliers.enabled:
        result = apply_outliers(result, config.outliers)
        stages.append('outliers')

    if config.smoothing.enabled:
        result = apply_smoothing(result, config.smoothing)
        stages.append('smoothing')

    if config.differencing.enabled and config.differencing.order > 0:
        result = apply_differencing(result, config.differencing)
        stages.append('differencing')

    if config.scaling.enabled:
        result = apply_scaling(result, config.scaling)
        stages.append('scaling')

    logger.debug("preprocessing_applied", extra={
        "stages": stages,
        "input_points": len(series),
        "output_points": len(result)
    })
    return result
