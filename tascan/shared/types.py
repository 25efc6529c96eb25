"""
Shared types for indicator, pivot and scan modules.

This module consolidates the enums and small records that cross module
boundaries so that indicators, the ZigZag detector and the scanner agree
on one vocabulary.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd


class SignalType(Enum):
    """Type of trading signal."""
    BUY = "buy"
    SELL = "sell"


class PivotKind(Enum):
    """Kind of ZigZag pivot."""
    HIGH = "high"
    LOW = "low"


class ScanStatus(Enum):
    """Outcome of scanning a single symbol."""
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    ERROR = "error"


@dataclass(frozen=True)
class Signal:
    """
    A crossover event between two series.

    position is the chronological integer position in the series the
    crossover was detected on; timestamp is the matching index label.
    """
    position: int
    signal_type: SignalType
    value: float
    timestamp: Optional[pd.Timestamp] = None


@dataclass(frozen=True)
class PivotPoint:
    """A local extremum selected by the ZigZag detector."""
    index: int
    price: float
    kind: PivotKind
    timestamp: Optional[pd.Timestamp] = None
