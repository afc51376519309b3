# src/financial_projection/models/schedule.py
"""
Schedule Base

Every statement and supporting schedule is a named bundle of per-period
series aligned on the same index: 0 is the historical year, 1..N are
projected years.
"""

from typing import Dict, List, Sequence, Tuple

import pandas as pd


class Schedule:
    """
    Named bundle of aligned per-period series.

    Subclasses list their line items in SERIES; each becomes a list
    attribute pre-filled with zeros. Once the projection has been
    reconciled the builder calls freeze(), which turns every series into
    a tuple.
    """

    NAME = 'schedule'
    SERIES: Tuple[str, ...] = ()

    def __init__(self, years: Sequence[str]):
        """
        Initialize empty series.

        Args:
            years: Period labels, historical year first
        """
        self.years = list(years)
        self._frozen = False
        for name in self.SERIES:
            setattr(self, name, [0.0] * len(self.years))

    @property
    def periods(self) -> int:
        """Number of periods including the historical year."""
        return len(self.years)

    @property
    def horizon(self) -> int:
        """Number of projected periods."""
        return len(self.years) - 1

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make every series immutable."""
        if self._frozen:
            return
        for name in self.SERIES:
            setattr(self, name, tuple(getattr(self, name)))
        self.years = tuple(self.years)
        self._frozen = True

    def series(self, name: str) -> Sequence[float]:
        if name not in self.SERIES:
            raise KeyError(f"{self.NAME} has no series '{name}'")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, List[float]]:
        """
        Convert schedule to dictionary format.

        Returns:
            Mapping of series name to per-period values, plus 'years'
        """
        result: Dict[str, List] = {'years': list(self.years)}
        for name in self.SERIES:
            result[name] = list(getattr(self, name))
        return result

    def to_dataframe(self, transpose: bool = False) -> pd.DataFrame:
        """
        Convert schedule to DataFrame.

        Args:
            transpose: Put periods in columns (statement layout) instead
                of rows

        Returns:
            DataFrame indexed by period label
        """
        data = {name: list(getattr(self, name)) for name in self.SERIES}
        df = pd.DataFrame(data, index=pd.Index(list(self.years), name='period'))
        return df.T if transpose else df

    def __repr__(self) -> str:
        return f"{type(self).__name__}(periods={self.periods}, frozen={self._frozen})"
