"""
Data Loader - Switchable Source (CSV | Cache)

Provides a unified interface for loading OHLCV bars for the indicator
pipeline.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence
from enum import Enum
from datetime import datetime, timezone
import json
import os

import pandas as pd

from chartcore.models.ohlcv import Bar

logger = logging.getLogger(__name__)

TIME_COLUMNS = ["timestamp_utc", "timestamp", "datetime", "time", "date"]


class DataSource(Enum):
    """Data source types."""
    CSV = "csv"
    CACHE = "cache"


def bars_from_records(records: Sequence[Dict[str, Any]]) -> List[Bar]:
    """Convert loader records into bars, skipping records that violate OHLC order."""
    bars = []
    for record in records:
        try:
            bars.append(Bar.from_dict(record))
        except (ValueError, TypeError) as e:
            logger.warning("Invalid bar record skipped", extra={"record": record, "error": str(e)})
    return bars


class DataLoader:
    """
    Unified data loader with switchable sources.

    Supports:
    - CSV exports (pandas)
    - Cached JSON bars (replay)
    """

    def __init__(self, config: Dict = None):
        """
        Initialize data loader.

        Args:
            config: Data loader config
                {
                  "source": "csv|cache",
                  "csv_path": "...",
                  "cache": { "path": "..." }
                }
        """
        self.config = config or {}
        self.source = DataSource(self.config.get("source", "csv"))
        self.cache_config = self.config.get("cache", {})

        logger.info("Data loader initialized", extra={"source": self.source.value})

    def load_bars(self, symbol: str, timeframe: str, count: int) -> Optional[List[Bar]]:
        """
        Load the last `count` bars from the configured source.

        Args:
            symbol: Symbol name (e.g., "EURUSD")
            timeframe: Timeframe (e.g., "5m")
            count: Number of bars to load

        Returns:
            Bars in ascending time order, or None if the source is unavailable
        """
        records = self.fetch_ohlcv(symbol, timeframe, count)
        if records is None:
            return None
        return bars_from_records(records)

    def fetch_ohlcv(self, symbol: str, timeframe: str, count: int) -> Optional[List[Dict]]:
        """
        Fetch raw OHLCV records from the configured source.

        Returns:
            List of OHLCV dicts with epoch-second times
        """
        if self.source == DataSource.CACHE:
            return self._fetch_cached(symbol, timeframe, count)
        return self._fetch_csv(symbol, timeframe, count)

    def _cache_file(self, symbol: str, timeframe: str) -> str:
        cache_path = self.cache_config.get("path", "data/cache")
        return os.path.join(cache_path, f"{symbol}_{timeframe}.json")

    def _fetch_cached(self, symbol: str, timeframe: str, count: int) -> Optional[List[Dict]]:
        """
        Fetch OHLCV data from cache.

        Args:
            symbol: Symbol name
            timeframe: Timeframe
            count: Number of bars

        Returns:
            List of cached OHLCV dicts or None
        """
        cache_file = self._cache_file(symbol, timeframe)

        if not os.path.exists(cache_file):
            logger.warning("Cache file not found", extra={"file": cache_file})
            return None

        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Cache load error", extra={
                "file": cache_file,
                "error": str(e)
            })
            return None

        bars = data.get("bars", [])[-count:]  # Get last N bars

        logger.info("Cached data loaded", extra={
            "symbol": symbol,
            "timeframe": timeframe,
            "bars": len(bars)
        })
        return bars

    def cache_bars(self, symbol: str, timeframe: str, bars: Sequence[Bar]) -> bool:
        """
        Cache bars for later replay.

        Args:
            symbol: Symbol name
            timeframe: Timeframe
            bars: Bars to cache

        Returns:
            True if caching successful
        """
        cache_file = self._cache_file(symbol, timeframe)

        try:
            os.makedirs(os.path.dirname(cache_file) or ".", exist_ok=True)
            data = {
                "symbol": symbol,
                "timeframe": timeframe,
                "cached_at": datetime.now(timezone.utc).isoformat(),
                "bars": [bar.to_dict() for bar in bars],
            }

            with open(cache_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)

            logger.info("Data cached", extra={
                "symbol": symbol,
                "timeframe": timeframe,
                "file": cache_file,
                "bars": len(bars)
            })
            return True

        except (OSError, TypeError) as e:
            logger.error("Cache write error", extra={
                "file": cache_file,
                "error": str(e)
            })
            return False

    def switch_source(self, new_source: str) -> bool:
        """
        Switch data source at runtime.

        Args:
            new_source: New source ("csv" or "cache")

        Returns:
            True if switch successful
        """
        try:
            self.source = DataSource(new_source)
        except ValueError as e:
            logger.error("Source switch error", extra={"error": str(e)})
            return False
        logger.info("Data source switched", extra={"source": new_source})
        return True

    def _fetch_csv(self, symbol: str, timeframe: str, count: int) -> Optional[List[Dict]]:
        """
        Fetch OHLCV data from CSV file.

        Args:
            symbol: Symbol name
            timeframe: Timeframe
            count: Number of bars to fetch

        Returns:
            List of OHLCV dicts or None
        """
        csv_path = self.config.get("csv_path", "data/bars.csv")

        if not os.path.exists(csv_path):
            logger.error("CSV file not found", extra={"path": csv_path})
            return None

        try:
            df = pd.read_csv(csv_path)
        except (OSError, ValueError) as e:
            logger.error("CSV load error", extra={"path": csv_path, "error": str(e)})
            return None

        # Standardize column names
        df.columns = [c.strip().lower() for c in df.columns]

        missing = [c for c in ("open", "high", "low", "close") if c not in df.columns]
        if missing:
            logger.error("CSV missing price columns", extra={"path": csv_path, "columns": missing})
            return None

        # Parse timestamp
        time_col = next((c for c in TIME_COLUMNS if c in df.columns), None)
        if time_col is None:
            logger.error("No timestamp column found in CSV", extra={"path": csv_path})
            return None

        if pd.api.types.is_numeric_dtype(df[time_col]):
            df = df[df[time_col].notna()]
            times = df[time_col].astype("int64")
        else:
            parsed = pd.to_datetime(df[time_col], utc=True, errors="coerce")
            df = df[parsed.notna()]
            times = parsed[parsed.notna()].map(lambda ts: int(ts.timestamp()))
        df = df.assign(_time=times).sort_values("_time", kind="stable")

        # Get last N bars
        df = df.tail(count)

        has_volume = "volume" in df.columns
        bars = []
        for _, row in df.iterrows():
            bars.append({
                "time": int(row["_time"]),
                "open": float(row["open"]),
                "high": float(row["high"]),
                "low": float(row["low"]),
                "close": float(row["close"]),
                "volume": float(row["volume"]) if has_volume else 0.0,
            })

        logger.info("CSV data loaded", extra={
            "symbol": symbol,
            "timeframe": timeframe,
            "bars": len(bars),
            "path": csv_path
        })
        return bars

    def get_source(self) -> str:
        """Get current data source."""
        return self.source.value
