from typing import Any, Optional

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.exceptions import NotFittedError

from vcdomlem._induction import RuleInductionTimes, VCDomLEM
from vcdomlem import _helpers
from vcdomlem._params import DEFAULT_PARAMS_VALUES, to_vcdomlem_parameters
from vcdomlem.classification import SimpleRuleClassifier
from vcdomlem.conditions import RuleType
from vcdomlem.information_table import InformationTable, MissingValueType
from vcdomlem.rule_conditions import AllowedNegativeObjectsType
from vcdomlem.rules import RuleSetWithComputableCharacteristics
from vcdomlem.unions import Unions


class VCDomLEMModel(BaseEstimator):
    """Induces decision rules from ordinal data with VC-DomLEM algorithm. It
    produces rules in the following form:
        IF a1 >= v1 AND a2 <= v2 ... THEN decision >= d

    for upward unions of decision classes and analogous "at most" rules for
    downward unions.
    """

    def __init__(
        self,
        consistency_threshold: float = DEFAULT_PARAMS_VALUES["consistency_threshold"],
        rule_type: RuleType = DEFAULT_PARAMS_VALUES["rule_type"],
        allowed_negative_objects_type: Optional[
            AllowedNegativeObjectsType
        ] = DEFAULT_PARAMS_VALUES["allowed_negative_objects_type"],
        condition_generator: str = DEFAULT_PARAMS_VALUES["condition_generator"],
        rule_conditions_generalizer: str = DEFAULT_PARAMS_VALUES[
            "rule_conditions_generalizer"
        ],
        missing_value_type: MissingValueType = DEFAULT_PARAMS_VALUES[
            "missing_value_type"
        ],
        preference_types: Optional[dict[str, str]] = DEFAULT_PARAMS_VALUES[
            "preference_types"
        ],
        n_jobs: int = DEFAULT_PARAMS_VALUES["n_jobs"],
        verbose: bool = DEFAULT_PARAMS_VALUES["verbose"],
    ):
        """
        Args:
            consistency_threshold (float, optional): Floating-point number from [0,1]
                interval. Objects whose epsilon consistency does not exceed it belong
                to lower approximations of unions. Defaults to
                DEFAULT_PARAMS_VALUES["consistency_threshold"].
            rule_type (RuleType, optional): Type of induced rules, certain rules are
                induced from lower approximations, possible rules from upper
                approximations. Defaults to DEFAULT_PARAMS_VALUES["rule_type"].
            allowed_negative_objects_type (Optional[AllowedNegativeObjectsType],
                optional): Objects that may be covered by induced rules. Defaults to
                DEFAULT_PARAMS_VALUES["allowed_negative_objects_type"] meaning
                positive region for certain rules and approximation for possible
                rules.
            condition_generator (str, optional): Generator of elementary conditions,
                "standard" or "m4". Defaults to
                DEFAULT_PARAMS_VALUES["condition_generator"].
            rule_conditions_generalizer (str, optional): Generalizer of pruned rule
                conditions, "optimizing" or "dummy". Defaults to
                DEFAULT_PARAMS_VALUES["rule_conditions_generalizer"].
            missing_value_type (MissingValueType, optional): Semantics of missing
                values. Defaults to DEFAULT_PARAMS_VALUES["missing_value_type"].
            preference_types (Optional[dict[str, str]], optional): Preference types
                ("gain", "cost" or "none") of condition attributes given by column
                name. Defaults to DEFAULT_PARAMS_VALUES["preference_types"] meaning
                gain for numerical and none for nominal attributes.
            n_jobs (int, optional): Number of threads inducing rules for different
                unions. Defaults to DEFAULT_PARAMS_VALUES["n_jobs"].
            verbose (bool, optional): Enables logging of the induction progress.
                Defaults to DEFAULT_PARAMS_VALUES["verbose"].
        """
        # pylint: disable=unused-argument
        params: dict = locals()
        params.pop("self")
        self._params: dict[str, Any] = params
        self.induction_times: RuleInductionTimes = None
        self.ruleset: Optional[RuleSetWithComputableCharacteristics] = None
        self.information_table: Optional[InformationTable] = None
        self.classifier: Optional[SimpleRuleClassifier] = None
        self._inducer: VCDomLEM = None

    def set_params(self, **params):
        self._params.update(params)

    def get_params(self, deep=True) -> dict:
        return self._params

    def fit(self, X: pd.DataFrame, y: pd.Series) -> RuleSetWithComputableCharacteristics:
        """Induces rules from given data.

        Args:
            X (pd.DataFrame): dataset
            y (pd.Series): ordinal decision column, greater values are better

        Returns:
            RuleSetWithComputableCharacteristics: "at least" rules for upward unions
                followed by "at most" rules for downward unions
        """
        self.information_table = InformationTable(
            X,
            y,
            preference_types=self._params["preference_types"],
            missing_value_type=self._params["missing_value_type"],
        )
        unions = Unions(self.information_table)
        self._inducer = VCDomLEM(to_vcdomlem_parameters(self._params))
        self.ruleset = self._inducer.generate_rules(
            unions.upward_unions + unions.downward_unions
        )[0]
        self.induction_times = self._inducer.induction_times
        self.classifier = SimpleRuleClassifier(
            self.ruleset,
            self.information_table.ordered_decision_values(),
            _helpers.to_python_scalar(self.information_table.y.value_counts().idxmax()),
        )
        return self.ruleset

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Classifies objects with induced rules.

        Args:
            X (pd.DataFrame): dataset with the same condition columns as the
                learning one

        Raises:
            NotFittedError: when the model has not been fitted yet

        Returns:
            np.ndarray: decision of each object, the most frequent learning
                decision for objects not covered by any rule
        """
        if self.classifier is None:
            raise NotFittedError("VCDomLEMModel has to be fitted before prediction.")
        return self.classifier.predict(self._create_classified_table(X))

    def _create_classified_table(self, X: pd.DataFrame) -> InformationTable:
        columns: list = list(self.information_table.X.columns)
        preference_types: dict = {
            column: attribute.preference_type
            for column, attribute in zip(columns, self.information_table.attributes)
        }
        # decisions of classified objects are unknown, the column is only filled
        y = pd.Series(
            [self.classifier.default_decision] * X.shape[0],
            name=self.information_table.y.name,
        )
        return InformationTable(
            X[columns],
            y,
            preference_types=preference_types,
            decision_preference_type=(
                self.information_table.decision_attribute.preference_type
            ),
            missing_value_type=self.information_table.missing_value_type,
        )
