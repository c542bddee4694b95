"""
pandas DataFrame bridge.

Reads records from DataFrame rows and writes records into a DataFrame
whose columns are the plan's writable columns. Missing values (NaN, NaT,
pandas.NA) read as None into nullable fields.
"""
from collections.abc import Iterable
from typing import Any

import pandas as pd
from rowmapper.plan import RecordPlan

__all__ = ['frame_to_records', 'records_to_frame']


def _empty_dataframe(plan: RecordPlan) -> pd.DataFrame:
    """Create empty DataFrame with the plan's writable columns."""
    df = pd.DataFrame(columns=plan.writable_columns())
    df.attrs['record_type'] = plan.record_type.__name__
    return df


def frame_to_records(plan: RecordPlan, df: pd.DataFrame) -> list[Any]:
    """Create one record per DataFrame row.
    """
    if df is None or df.empty:
        return []
    return [plan.populate(row, plan.create_instance())
            for row in df.to_dict('records')]


def records_to_frame(plan: RecordPlan, instances: Iterable[Any]) -> pd.DataFrame:
    """Serialize records into a DataFrame, one row per record.

    Always returns a DataFrame, with the writable columns preserved for
    empty input.
    """
    rows = [plan.serialize(instance) for instance in instances]
    if not rows:
        return _empty_dataframe(plan)
    df = pd.DataFrame.from_records(rows, columns=plan.writable_columns())
    df.attrs['record_type'] = plan.record_type.__name__
    return df
