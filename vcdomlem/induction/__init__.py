"""Components of sequential covering rule induction: stopping condition checkers,
condition generators, rule conditions pruners and generalizers, rule conditions
set pruners and rule minimality checkers.
"""
from vcdomlem.induction._base import (ConditionGenerator,
                                      RuleConditionsGeneralizer,
                                      RuleConditionsPruner,
                                      RuleConditionsSetPruner,
                                      RuleMinimalityChecker,
                                      StoppingConditionChecker)
from vcdomlem.induction.generalizing import (
    DummyRuleConditionsGeneralizer, OptimizingRuleConditionsGeneralizer)
from vcdomlem.induction.generator import (M4OptimizedConditionGenerator,
                                          StandardConditionGenerator)
from vcdomlem.induction.pruning import (
    AttributeOrderRuleConditionsPruner, DummyRuleConditionsPruner,
    DummyRuleConditionsSetPruner, DummyRuleMinimalityChecker,
    EvaluationsAndOrderRuleConditionsSetPruner, FIFORuleConditionsPruner,
    SingleEvaluationRuleMinimalityChecker)
from vcdomlem.induction.stopping import \
    EvaluationAndCoverageStoppingConditionChecker

__all__ = [
    "ConditionGenerator",
    "RuleConditionsGeneralizer",
    "RuleConditionsPruner",
    "RuleConditionsSetPruner",
    "RuleMinimalityChecker",
    "StoppingConditionChecker",
    "StandardConditionGenerator",
    "M4OptimizedConditionGenerator",
    "AttributeOrderRuleConditionsPruner",
    "FIFORuleConditionsPruner",
    "DummyRuleConditionsPruner",
    "OptimizingRuleConditionsGeneralizer",
    "DummyRuleConditionsGeneralizer",
    "EvaluationsAndOrderRuleConditionsSetPruner",
    "DummyRuleConditionsSetPruner",
    "SingleEvaluationRuleMinimalityChecker",
    "DummyRuleMinimalityChecker",
    "EvaluationAndCoverageStoppingConditionChecker",
]
