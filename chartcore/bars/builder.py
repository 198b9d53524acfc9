"""Base class for all synthetic bar builders."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..models.ohlcv import Bar
from .sizing import FallbackChain

logger = logging.getLogger(__name__)


class SyntheticBarBuilder(ABC):
    """
    Abstract base class for range/renko/kagi builders.

    Builders only hold configuration. Each `build()` call runs its state
    machine from scratch on the given bars and returns a new list; when the
    machine emits nothing the input is returned (copied) unchanged.
    """

    def __init__(self, name: str, parameters: Dict[str, Any] = None):
        """
        Initialize builder.

        Args:
            name: Builder name (e.g., 'RenkoBuilder')
            parameters: Configuration parameters
        """
        self.name = name
        self.parameters = parameters or {}

        # Validate parameters (subclass can override)
        self._validate_parameters()

        logger.debug(f"Initialized {self.name}", extra={"parameters": self.parameters})

    @abstractmethod
    def size_chain(self) -> FallbackChain:
        """Ordered size strategies for this builder."""

    @abstractmethod
    def _run(self, bars: Sequence[Bar], size: float) -> List[Bar]:
        """Run the state machine with a resolved size."""

    def _validate_parameters(self) -> None:
        """
        Validate builder parameters.

        Subclasses should override to validate their specific parameters.
        Called during __init__(), so subclass attributes must be set BEFORE super().__init__().
        """
        pass

    def build(self, bars: Sequence[Bar], timeframe: Optional[str] = None) -> List[Bar]:
        """
        Transform bars into synthetic bars.

        Args:
            bars: Input bars, ascending time
            timeframe: Nominal interval of the input (e.g. '5m'), used for default sizing

        Returns:
            Synthetic bars, or a copy of the input if no size is usable or nothing was emitted
        """
        if not bars:
            return []

        size, source = self.size_chain().resolve(bars, timeframe)
        if source is None:
            logger.debug("synthetic_size_unavailable", extra={"builder": self.name, "bars": len(bars)})
            return list(bars)

        out = self._run(bars, size)
        if not out:
            logger.debug("synthetic_no_bars_emitted", extra={"builder": self.name, "size": size})
            return list(bars)

        logger.debug("synthetic_bars_built", extra={
            "builder": self.name,
            "size": size,
            "size_source": source,
            "input_bars": len(bars),
            "output_bars": len(out)
        })
        return out
