from typing import Any, Optional, TypeVar

import numpy as np
import pandas as pd

T = TypeVar("T")


def not_none(value: Optional[T], message: str) -> T:
    """Returns given value or raises TypeError when it is None

    Args:
        value (Optional[T]): checked value
        message (str): error message

    Raises:
        TypeError: if value is None

    Returns:
        T: given value
    """
    if value is None:
        raise TypeError(message)
    return value


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and np.isnan(value):
        return True
    return False


def to_python_scalar(value: Any) -> Any:
    """Converts numpy scalars to plain python ones and missing values to None"""
    if isinstance(value, np.generic):
        value = value.item()
    if is_missing(value) or value is pd.NA:
        return None
    return value


def get_nominal_indexes(df: pd.DataFrame) -> list[int]:
    """Return indices of nominal columns in given dataframe

    Args:
        df (pd.DataFrame): DataFrame

    Returns:
        list[int]: list of indices of nominal columns
    """
    dtype_mask = ~df.dtypes.apply(pd.api.types.is_numeric_dtype).to_numpy()
    nominal_indexes = np.where(dtype_mask)[0]
    return nominal_indexes.tolist()


def format_number(value: Any) -> str:
    """Renders number without superfluous trailing zeros, e.g. 10.0 -> "10"."""
    if isinstance(value, (bool, np.bool_)):
        return str(value)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
