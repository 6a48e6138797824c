import os
import pathlib

import numpy as np
import pandas as pd

from vcdomlem.information_table import InformationTable, MissingValueType

dir_path: pathlib.Path = pathlib.Path(os.path.dirname(os.path.realpath(__file__)))


def read_dataset(
    dataset_name: str, label_column: str, id_column: str = None
) -> tuple[pd.DataFrame, pd.Series]:
    base_path: pathlib.Path = dir_path / "datasets" / dataset_name
    df: pd.DataFrame = pd.read_csv(base_path / f"{dataset_name}.csv")
    if id_column is not None:
        df = df.drop(id_column, axis=1)
    X, y = df.drop(label_column, axis=1), df[label_column]
    return X, y


def read_bus_dataset() -> tuple[pd.DataFrame, pd.Series]:
    return read_dataset("bus", label_column="state", id_column="bus")


def create_bus_information_table() -> InformationTable:
    X, y = read_bus_dataset()
    return InformationTable(X, y)


def create_table(columns: dict[str, list], decisions: list, **kwargs) -> InformationTable:
    return InformationTable(
        pd.DataFrame(columns), pd.Series(decisions, name="decision"), **kwargs
    )


def create_random_table_with_missing_values(
    seed: int, missing_value_type: MissingValueType, n: int = 30
) -> InformationTable:
    """Table with two numerical criteria (one of cost type), one nominal attribute
    and about 10% of missing evaluations"""
    rng = np.random.default_rng(seed)

    def evaluations(values: list) -> list:
        return [None if rng.random() < 0.1 else values[i] for i in range(n)]

    columns: dict[str, list] = {
        "a": evaluations(rng.integers(0, 5, n).astype(float).tolist()),
        "b": evaluations(rng.integers(0, 5, n).astype(float).tolist()),
        "c": evaluations([str(value) for value in rng.choice(["x", "y", "z"], n)]),
    }
    decisions: list[int] = rng.integers(0, 3, n).tolist()
    return create_table(
        columns,
        decisions,
        preference_types={"b": "cost"},
        missing_value_type=missing_value_type,
    )
