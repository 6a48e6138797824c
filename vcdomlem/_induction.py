from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from datetime import timedelta
from logging import Logger, getLogger
from threading import Lock
from typing import Any, Callable, Optional

import numpy as np
from joblib import Parallel, delayed

from vcdomlem import _helpers
from vcdomlem._params import VCDomLEMParameters
from vcdomlem._timing import PerformanceTimer
from vcdomlem.cache import ConditionsCoverageCache
from vcdomlem.conditions import Condition, RuleType
from vcdomlem.induction import (RuleConditionsGeneralizer,
                                RuleConditionsPruner,
                                StoppingConditionChecker)
from vcdomlem.information_table import InformationTable
from vcdomlem.rule_conditions import (AllowedNegativeObjectsType,
                                      RuleConditions, RuleCoverageInformation)
from vcdomlem.rules import Rule, RuleSetWithComputableCharacteristics
from vcdomlem.unions import Union, UnionRuleDecisionsProvider


@dataclass
class RuleInductionTimes:
    """Time spent on each stage of rule induction, summed over all unions and
    consistency thresholds. Stages of different unions may overlap in time when
    rules are induced in parallel."""

    growing_time: timedelta = timedelta()
    pruning_time: timedelta = timedelta()
    generalizing_time: timedelta = timedelta()
    total_training_time: timedelta = timedelta()

    def __add__(self, other: RuleInductionTimes) -> RuleInductionTimes:
        if other == 0:
            return self
        if not isinstance(other, RuleInductionTimes):
            raise TypeError(f"Cannot add {type(other)} to RuleInductionTimes")
        return RuleInductionTimes(
            **{
                stage.name: getattr(self, stage.name) + getattr(other, stage.name)
                for stage in fields(self)
            }
        )

    def __radd__(self, other: RuleInductionTimes) -> RuleInductionTimes:
        return self.__add__(other)

    def __repr__(self) -> str:
        return ", ".join(
            f"{stage.name}={getattr(self, stage.name).total_seconds()}"
            for stage in fields(self)
        )


class RuleInducersMixin(ABC):
    """Measures time spent on growing, pruning and generalizing rule conditions and
    on the whole rules generation. Times of methods run concurrently by worker
    threads are accumulated under a lock."""

    # timed method -> field of RuleInductionTimes
    _TIMED_METHODS: dict[str, str] = {
        "generate_rules": "total_training_time",
        "_grow": "growing_time",
        "_prune": "pruning_time",
        "_generalize": "generalizing_time",
    }

    def __init__(self):
        self.induction_times: RuleInductionTimes = RuleInductionTimes()
        self._induction_times_lock: Lock = Lock()
        for method_name, save_to in self._TIMED_METHODS.items():
            self._setup_timer_for_method(method_name, save_to)

    @abstractmethod
    def generate_rules(
        self, unions: list[Union]
    ) -> list[RuleSetWithComputableCharacteristics]:
        raise NotImplementedError(
            "RuleInducersMixin requires generate_rules method to be implemented"
        )

    @abstractmethod
    def _grow(self, *args, **kwargs) -> Any:
        pass

    @abstractmethod
    def _prune(self, *args, **kwargs) -> Any:
        pass

    @abstractmethod
    def _generalize(self, *args, **kwargs) -> Any:
        pass

    def _setup_timer_for_method(self, method_name: str, save_to: str):
        method: Callable = getattr(self, method_name, None)
        if method is None:
            raise ValueError(
                f"RuleInducersMixin requires {method_name} method to be implemented"
            )

        def wrapped_method(*args, **kwargs):
            with PerformanceTimer() as timer:
                result: Any = method(*args, **kwargs)
            with self._induction_times_lock:
                setattr(
                    self.induction_times,
                    save_to,
                    getattr(self.induction_times, save_to) + timer.timedelta,
                )
            return result

        setattr(self, method_name, wrapped_method)


@dataclass
class _ThresholdContext:
    consistency_threshold: float
    stopping_condition_checker: StoppingConditionChecker
    rule_conditions_pruner: RuleConditionsPruner
    rule_conditions_generalizer: RuleConditionsGeneralizer


class VCDomLEM(RuleInducersMixin):
    """Induces decision rules describing unions of ordered decision classes with
    sequential covering VC-DomLEM algorithm.

    For each union, rule conditions are grown condition by condition until the
    stopping condition is satisfied, then pruned and generalized. Objects covered
    by the new rule conditions are removed from the set of objects still to
    cover, and the process repeats until every object of the union approximation
    is covered. Redundant and non-minimal rule conditions are removed at the end.

    Args:
        params (Optional[VCDomLEMParameters], optional): components and settings
            of the algorithm. Defaults to None meaning default parameters.
    """

    def __init__(self, params: Optional[VCDomLEMParameters] = None):
        super().__init__()
        self.params: VCDomLEMParameters = (
            params if params is not None else VCDomLEMParameters()
        )
        self.rule_decisions_provider: UnionRuleDecisionsProvider = (
            UnionRuleDecisionsProvider()
        )
        self.logger: Logger = getLogger(self.__class__.__name__)
        self.logger.disabled = not self.params.verbose

    def generate_rules(
        self, unions: list[Union]
    ) -> list[RuleSetWithComputableCharacteristics]:
        """Induces rules for the given unions, once for every consistency threshold

        Args:
            unions (list[Union]): unions of decision classes, all built for the
                same information table. Rules are returned in the order of unions.

        Returns:
            list[RuleSetWithComputableCharacteristics]: one rule set per
                consistency threshold, in the order of thresholds
        """
        _helpers.not_none(unions, "Unions are null.")
        unions = list(unions)
        information_table: Optional[InformationTable] = None
        if len(unions) > 0:
            information_table = unions[0].information_table
            for union in unions:
                if union.information_table is not information_table:
                    raise ValueError("All unions have to be built for the same table")
        cache: Optional[ConditionsCoverageCache] = (
            ConditionsCoverageCache(information_table)
            if information_table is not None
            else None
        )

        rule_sets: list[RuleSetWithComputableCharacteristics] = []
        for consistency_threshold in self.params.consistency_thresholds:
            self.logger.info(
                "Inducing rules for %d unions, consistency threshold: %s",
                len(unions),
                consistency_threshold,
            )
            context: _ThresholdContext = self._create_threshold_context(
                consistency_threshold
            )
            unions_results: list[
                tuple[list[Rule], list[RuleCoverageInformation]]
            ] = Parallel(n_jobs=self.params.n_jobs, prefer="threads")(
                delayed(self._induce_rules_for_union)(**params)
                for params in [
                    {"union": union, "context": context, "cache": cache}
                    for union in unions
                ]
            )
            rules: list[Rule] = []
            coverage_informations: list[RuleCoverageInformation] = []
            for union_rules, union_coverage_informations in unions_results:
                rules += union_rules
                coverage_informations += union_coverage_informations
            rule_set = RuleSetWithComputableCharacteristics(
                rules, coverage_informations, True
            )
            if information_table is not None:
                rule_set.learning_information_table_hash = information_table.hash
            self.logger.info(
                "Induced %d rules for consistency threshold: %s",
                len(rules),
                consistency_threshold,
            )
            rule_sets.append(rule_set)
        return rule_sets

    def _create_threshold_context(self, consistency_threshold: float) -> _ThresholdContext:
        stopping_condition_checker: StoppingConditionChecker = (
            self.params.stopping_condition_checker
        )
        # possible rules are stopped by coverage outside approximation, whose
        # threshold is not a consistency threshold
        if self.params.rule_type == RuleType.CERTAIN:
            stopping_condition_checker = (
                self.params.stopping_condition_checker.copy_with_new_threshold(
                    consistency_threshold
                )
            )
        return _ThresholdContext(
            consistency_threshold=consistency_threshold,
            stopping_condition_checker=stopping_condition_checker,
            rule_conditions_pruner=self.params.rule_conditions_pruner(
                stopping_condition_checker
            ),
            rule_conditions_generalizer=self.params.rule_conditions_generalizer(
                stopping_condition_checker
            ),
        )

    def _get_approximation_mask(
        self, union: Union, consistency_threshold: float
    ) -> np.ndarray:
        if self.params.rule_type == RuleType.CERTAIN:
            return union.lower_approximation_mask(consistency_threshold)
        # classical upper approximation, closed under dominance unlike the relaxed one
        return union.upper_approximation_mask(0.0)

    def _get_can_be_covered_mask(
        self, union: Union, consistency_threshold: float, approximation_mask: np.ndarray
    ) -> np.ndarray:
        allowed_type: AllowedNegativeObjectsType = (
            self.params.allowed_negative_objects_type
        )
        if (
            self.params.rule_type != RuleType.CERTAIN
            or allowed_type == AllowedNegativeObjectsType.APPROXIMATION
        ):
            return approximation_mask | union.neutral_mask
        if allowed_type == AllowedNegativeObjectsType.ANY_REGION:
            return np.ones(union.information_table.number_of_objects, dtype=bool)
        mask: np.ndarray = union.positive_region_mask(consistency_threshold)
        if allowed_type == AllowedNegativeObjectsType.POSITIVE_AND_BOUNDARY_REGIONS:
            mask = mask | union.boundary_mask(consistency_threshold)
        return mask | union.neutral_mask

    def _induce_rules_for_union(
        self,
        union: Union,
        context: _ThresholdContext,
        cache: ConditionsCoverageCache,
    ) -> tuple[list[Rule], list[RuleCoverageInformation]]:
        approximation_mask: np.ndarray = self._get_approximation_mask(
            union, context.consistency_threshold
        )
        can_be_covered_mask: np.ndarray = self._get_can_be_covered_mask(
            union, context.consistency_threshold, approximation_mask
        )
        indices_of_approximation_objects: list[int] = np.flatnonzero(
            approximation_mask
        ).tolist()
        indices_of_objects_that_can_be_covered: list[int] = np.flatnonzero(
            can_be_covered_mask
        ).tolist()
        self.logger.info(
            "Inducing rules for %s, approximation size: %d",
            union,
            len(indices_of_approximation_objects),
        )

        rule_conditions_list: list[RuleConditions] = []
        uncovered: list[int] = list(indices_of_approximation_objects)
        while len(uncovered) > 0:
            rule_conditions = RuleConditions(
                union.information_table,
                union.objects,
                indices_of_approximation_objects,
                indices_of_objects_that_can_be_covered,
                union.neutral_objects,
                rule_type=self.params.rule_type,
                rule_semantics=union.rule_semantics,
                coverage_cache=cache,
            )
            rule_conditions = self._grow(
                rule_conditions, uncovered, context.stopping_condition_checker
            )
            rule_conditions = self._prune(
                rule_conditions, context.rule_conditions_pruner
            )
            rule_conditions = self._generalize(
                rule_conditions, context.rule_conditions_generalizer
            )
            rule_conditions_list.append(rule_conditions)

            covered_mask: np.ndarray = rule_conditions.covered_mask
            new_uncovered: list[int] = [i for i in uncovered if not covered_mask[i]]
            self.logger.debug(
                "New rule conditions: %s, covered %d of %d uncovered objects",
                rule_conditions,
                len(uncovered) - len(new_uncovered),
                len(uncovered),
            )
            uncovered = new_uncovered

        rule_conditions_list = self.params.rule_conditions_set_pruner.prune(
            rule_conditions_list, set(indices_of_approximation_objects)
        )
        rule_conditions_list = self.params.rule_minimality_checker.filter(
            rule_conditions_list
        )

        decisions: list[list[Condition]] = self.rule_decisions_provider.get_rule_decisions(
            union
        )
        rules: list[Rule] = []
        coverage_informations: list[RuleCoverageInformation] = []
        for rule_conditions in rule_conditions_list:
            rules.append(
                Rule(
                    rule_type=self.params.rule_type,
                    rule_semantics=union.rule_semantics,
                    conditions=tuple(rule_conditions.conditions),
                    decisions=tuple(tuple(alternative) for alternative in decisions),
                    condition_separator=self.params.condition_separator,
                )
            )
            coverage_informations.append(rule_conditions.get_rule_coverage_information())
        self.logger.info("Induced %d rules for %s", len(rules), union)
        return rules, coverage_informations

    def _grow(
        self,
        rule_conditions: RuleConditions,
        uncovered: list[int],
        stopping_condition_checker: StoppingConditionChecker,
    ) -> RuleConditions:
        while not stopping_condition_checker.is_satisfied(rule_conditions):
            covered_mask: np.ndarray = rule_conditions.covered_mask
            considered_objects: list[int] = [i for i in uncovered if covered_mask[i]]
            condition: Condition = self.params.condition_generator.get_best_condition(
                considered_objects, rule_conditions
            )
            rule_conditions.add_condition(condition)
        return rule_conditions

    def _prune(
        self, rule_conditions: RuleConditions, pruner: RuleConditionsPruner
    ) -> RuleConditions:
        return pruner.prune(rule_conditions)

    def _generalize(
        self, rule_conditions: RuleConditions, generalizer: RuleConditionsGeneralizer
    ) -> RuleConditions:
        return generalizer.generalize(rule_conditions)
