from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, TypedDict

from vcdomlem.conditions import RuleType
from vcdomlem.evaluators import (CoverageInApproximationMeasure,
                                 EpsilonConsistencyMeasure,
                                 RelativeCoverageOutsideApproximationMeasure,
                                 RuleConditionsEvaluator, SupportMeasure)
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.induction import (AttributeOrderRuleConditionsPruner,
                                ConditionGenerator,
                                DummyRuleConditionsGeneralizer,
                                EvaluationAndCoverageStoppingConditionChecker,
                                EvaluationsAndOrderRuleConditionsSetPruner,
                                M4OptimizedConditionGenerator,
                                OptimizingRuleConditionsGeneralizer,
                                RuleConditionsGeneralizer,
                                RuleConditionsPruner, RuleConditionsSetPruner,
                                RuleMinimalityChecker,
                                SingleEvaluationRuleMinimalityChecker,
                                StandardConditionGenerator,
                                StoppingConditionChecker)
from vcdomlem.information_table import MissingValueType
from vcdomlem.rule_conditions import AllowedNegativeObjectsType

DEFAULT_CONSISTENCY_THRESHOLD: float = 0.0

RuleConditionsPrunerFactory = Callable[[StoppingConditionChecker], RuleConditionsPruner]
RuleConditionsGeneralizerFactory = Callable[
    [StoppingConditionChecker], RuleConditionsGeneralizer
]


def _default_condition_addition_evaluators(
    rule_type: RuleType,
) -> list[RuleConditionsEvaluator]:
    if rule_type == RuleType.POSSIBLE:
        return [
            RelativeCoverageOutsideApproximationMeasure(),
            CoverageInApproximationMeasure(),
        ]
    return [EpsilonConsistencyMeasure(), SupportMeasure()]


def _default_rule_conditions_evaluators(
    rule_type: RuleType,
) -> list[RuleConditionsEvaluator]:
    if rule_type == RuleType.POSSIBLE:
        return [
            CoverageInApproximationMeasure(),
            RelativeCoverageOutsideApproximationMeasure(),
        ]
    return [SupportMeasure(), EpsilonConsistencyMeasure()]


def _default_stopping_condition_checker(
    rule_type: RuleType,
) -> EvaluationAndCoverageStoppingConditionChecker:
    if rule_type == RuleType.POSSIBLE:
        return EvaluationAndCoverageStoppingConditionChecker(
            RelativeCoverageOutsideApproximationMeasure(), 0.0
        )
    return EvaluationAndCoverageStoppingConditionChecker(
        EpsilonConsistencyMeasure(), DEFAULT_CONSISTENCY_THRESHOLD
    )


def _default_rule_minimality_checker(rule_type: RuleType) -> RuleMinimalityChecker:
    if rule_type == RuleType.POSSIBLE:
        return SingleEvaluationRuleMinimalityChecker(
            RelativeCoverageOutsideApproximationMeasure()
        )
    return SingleEvaluationRuleMinimalityChecker(EpsilonConsistencyMeasure())


@dataclass(frozen=True)
class VCDomLEMParameters:
    """Components and settings of VC-DomLEM algorithm. Components left as None are
    replaced with defaults suitable for the rule type.

    Rule conditions pruner and generalizer are built for the stopping condition
    checker of each consistency threshold, so they are given as factories (e.g.
    a pruner class) taking the checker as their only argument.

    Args:
        consistency_thresholds (tuple[float, ...]): thresholds of epsilon
            consistency, one rule set is induced for each of them
        condition_addition_evaluators (Optional[list[RuleConditionsEvaluator]]):
            evaluators used to choose the best condition when growing rule
            conditions. Defaults to None meaning epsilon consistency and support
            for certain rules, relative coverage outside approximation and
            coverage in approximation for possible rules.
        rule_conditions_evaluators (Optional[list[RuleConditionsEvaluator]]):
            evaluators used by the rule conditions set pruner. Defaults to None
            meaning default condition addition evaluators in reversed order.
        condition_generator (Optional[ConditionGenerator]): generator of
            elementary conditions. Defaults to None meaning standard generator
            using condition addition evaluators.
        stopping_condition_checker (Optional[EvaluationAndCoverageStoppingConditionChecker]):
            checker of the end of rule conditions growing. For certain rules its
            threshold is replaced by each consistency threshold. Defaults to None
            meaning epsilon consistency checker for certain rules and relative
            coverage outside approximation checker for possible rules.
        condition_separator (Optional[str]): separator of conditions in textual
            representation of rules. Defaults to None meaning " & ".
        rule_conditions_pruner (RuleConditionsPrunerFactory): factory of pruner
            of elementary conditions
        rule_conditions_generalizer (RuleConditionsGeneralizerFactory): factory
            of generalizer of pruned rule conditions. Defaults to a generalizer
            leaving rule conditions unchanged.
        rule_conditions_set_pruner (Optional[RuleConditionsSetPruner]): pruner of
            redundant rule conditions. Defaults to None meaning pruner using rule
            conditions evaluators.
        rule_minimality_checker (Optional[RuleMinimalityChecker]): checker of rule
            minimality. Defaults to None meaning checker using the same measure
            as the default stopping condition checker.
        rule_type (RuleType): CERTAIN or POSSIBLE
        allowed_negative_objects_type (Optional[AllowedNegativeObjectsType]): objects
            that may be covered by induced rules. Defaults to None meaning
            POSITIVE_REGION for certain rules and APPROXIMATION for possible rules.
        n_jobs (int): number of threads inducing rules for different unions
        verbose (bool): enables logging
    """

    consistency_thresholds: tuple[float, ...] = (DEFAULT_CONSISTENCY_THRESHOLD,)
    condition_addition_evaluators: Optional[list[RuleConditionsEvaluator]] = None
    rule_conditions_evaluators: Optional[list[RuleConditionsEvaluator]] = None
    condition_generator: Optional[ConditionGenerator] = None
    stopping_condition_checker: Optional[
        EvaluationAndCoverageStoppingConditionChecker
    ] = None
    condition_separator: Optional[str] = None
    rule_conditions_pruner: RuleConditionsPrunerFactory = (
        AttributeOrderRuleConditionsPruner
    )
    rule_conditions_generalizer: RuleConditionsGeneralizerFactory = (
        DummyRuleConditionsGeneralizer
    )
    rule_conditions_set_pruner: Optional[RuleConditionsSetPruner] = None
    rule_minimality_checker: Optional[RuleMinimalityChecker] = None
    rule_type: RuleType = RuleType.CERTAIN
    allowed_negative_objects_type: Optional[AllowedNegativeObjectsType] = None
    n_jobs: int = 1
    verbose: bool = False

    def __post_init__(self):
        if self.consistency_thresholds is None or len(self.consistency_thresholds) == 0:
            raise InvalidValueError("At least one consistency threshold is required.")
        for threshold in self.consistency_thresholds:
            if not 0.0 <= threshold <= 1.0:
                raise InvalidValueError(
                    f"Consistency threshold {threshold} is outside of [0, 1]."
                )
        self._set("consistency_thresholds", tuple(self.consistency_thresholds))
        if self.rule_type not in (RuleType.CERTAIN, RuleType.POSSIBLE):
            raise InvalidValueError(
                f"Rules can be induced only of certain or possible type, "
                f"got: {self.rule_type}"
            )
        if self.rule_conditions_pruner is None:
            raise TypeError("Rule conditions pruner is null.")
        if self.rule_conditions_generalizer is None:
            raise TypeError("Rule conditions generalizer is null.")
        if self.n_jobs is None or self.n_jobs == 0:
            raise InvalidValueError("Number of jobs cannot be 0.")

        defaults: dict[str, Callable[[RuleType], object]] = {
            "condition_addition_evaluators": _default_condition_addition_evaluators,
            "rule_conditions_evaluators": _default_rule_conditions_evaluators,
            "stopping_condition_checker": _default_stopping_condition_checker,
            "rule_minimality_checker": _default_rule_minimality_checker,
        }
        for name, default_factory in defaults.items():
            if getattr(self, name) is None:
                self._set(name, default_factory(self.rule_type))
        if self.allowed_negative_objects_type is None:
            self._set(
                "allowed_negative_objects_type",
                AllowedNegativeObjectsType.POSITIVE_REGION
                if self.rule_type == RuleType.CERTAIN
                else AllowedNegativeObjectsType.APPROXIMATION,
            )
        if self.condition_generator is None:
            self._set(
                "condition_generator",
                StandardConditionGenerator(self.condition_addition_evaluators),
            )
        if self.rule_conditions_set_pruner is None:
            self._set(
                "rule_conditions_set_pruner",
                EvaluationsAndOrderRuleConditionsSetPruner(
                    self.rule_conditions_evaluators
                ),
            )

    def _set(self, name: str, value: object):
        object.__setattr__(self, name, value)


class AlgorithmParams(TypedDict):
    consistency_threshold: float
    rule_type: RuleType
    allowed_negative_objects_type: Optional[AllowedNegativeObjectsType]
    condition_generator: str
    rule_conditions_generalizer: str
    missing_value_type: MissingValueType
    preference_types: Optional[dict[str, str]]
    n_jobs: int
    verbose: bool


DEFAULT_PARAMS_VALUES: AlgorithmParams = AlgorithmParams(
    consistency_threshold=DEFAULT_CONSISTENCY_THRESHOLD,
    rule_type=RuleType.CERTAIN,
    allowed_negative_objects_type=None,
    condition_generator="standard",
    rule_conditions_generalizer="optimizing",
    missing_value_type=MissingValueType.MV2,
    preference_types=None,
    n_jobs=1,
    verbose=False,
)

_CONDITION_GENERATORS: dict[str, type[ConditionGenerator]] = {
    "standard": StandardConditionGenerator,
    "m4": M4OptimizedConditionGenerator,
}

_RULE_CONDITIONS_GENERALIZERS: dict[str, RuleConditionsGeneralizerFactory] = {
    "optimizing": OptimizingRuleConditionsGeneralizer,
    "dummy": DummyRuleConditionsGeneralizer,
}


def to_vcdomlem_parameters(params: AlgorithmParams) -> VCDomLEMParameters:
    generator_name: str = params["condition_generator"]
    if generator_name not in _CONDITION_GENERATORS:
        raise InvalidValueError(
            f'Unknown condition generator: "{generator_name}", '
            f"available: {list(_CONDITION_GENERATORS.keys())}"
        )
    generalizer_name: str = params["rule_conditions_generalizer"]
    if generalizer_name not in _RULE_CONDITIONS_GENERALIZERS:
        raise InvalidValueError(
            f'Unknown rule conditions generalizer: "{generalizer_name}", '
            f"available: {list(_RULE_CONDITIONS_GENERALIZERS.keys())}"
        )
    rule_type: RuleType = params["rule_type"]
    condition_addition_evaluators: list[RuleConditionsEvaluator] = (
        _default_condition_addition_evaluators(rule_type)
    )
    return VCDomLEMParameters(
        consistency_thresholds=(params["consistency_threshold"],),
        condition_addition_evaluators=condition_addition_evaluators,
        condition_generator=_CONDITION_GENERATORS[generator_name](
            condition_addition_evaluators
        ),
        rule_conditions_generalizer=_RULE_CONDITIONS_GENERALIZERS[generalizer_name],
        rule_type=rule_type,
        allowed_negative_objects_type=params["allowed_negative_objects_type"],
        n_jobs=params["n_jobs"],
        verbose=params["verbose"],
    )
