from abc import ABC, abstractmethod

from vcdomlem.conditions import Condition
from vcdomlem.rule_conditions import RuleConditions


class StoppingConditionChecker(ABC):

    @abstractmethod
    def is_satisfied(self, rule_conditions: RuleConditions) -> bool:
        pass

    @abstractmethod
    def is_satisfied_without_condition(
        self, rule_conditions: RuleConditions, condition_index: int
    ) -> bool:
        pass

    @abstractmethod
    def is_satisfied_when_replacing_condition(
        self, rule_conditions: RuleConditions, condition_index: int, condition: Condition
    ) -> bool:
        pass


class ConditionGenerator(ABC):

    @abstractmethod
    def get_best_condition(
        self, considered_objects: list[int], rule_conditions: RuleConditions
    ) -> Condition:
        pass


class RuleConditionsPruner(ABC):

    @abstractmethod
    def prune(self, rule_conditions: RuleConditions) -> RuleConditions:
        pass


class RuleConditionsSetPruner(ABC):

    @abstractmethod
    def prune(
        self,
        rule_conditions_list: list[RuleConditions],
        indices_of_objects_to_keep_covered: set[int],
    ) -> list[RuleConditions]:
        pass


class RuleMinimalityChecker(ABC):

    @abstractmethod
    def check(
        self, accepted_rule_conditions: list[RuleConditions], candidate: RuleConditions
    ) -> bool:
        """Returns True when candidate is minimal with respect to already accepted
        rule conditions"""

    def filter(self, rule_conditions_list: list[RuleConditions]) -> list[RuleConditions]:
        accepted: list[RuleConditions] = []
        for rule_conditions in rule_conditions_list:
            if self.check(accepted, rule_conditions):
                accepted.append(rule_conditions)
        return accepted


class RuleConditionsGeneralizer(ABC):

    @abstractmethod
    def generalize(self, rule_conditions: RuleConditions) -> RuleConditions:
        """Relaxes limiting evaluations of conditions, returns the same (modified)
        rule conditions"""
