import numpy as np
import pytest
import utils

from vcdomlem.conditions import (MISSING_EVALUATION, Condition, RuleSemantics,
                                 RuleType, construct_condition)
from vcdomlem.evaluators import (CoverageInApproximationMeasure,
                                 CoverageQualityMeasure,
                                 EpsilonConsistencyMeasure,
                                 RelativeCoverageOutsideApproximationMeasure,
                                 SupportMeasure)
from vcdomlem.exceptions import (ElementaryConditionNotFoundError,
                                 InvalidValueError)
from vcdomlem.induction import (AttributeOrderRuleConditionsPruner,
                                DummyRuleConditionsGeneralizer,
                                DummyRuleConditionsPruner,
                                DummyRuleConditionsSetPruner,
                                DummyRuleMinimalityChecker,
                                EvaluationAndCoverageStoppingConditionChecker,
                                EvaluationsAndOrderRuleConditionsSetPruner,
                                FIFORuleConditionsPruner,
                                M4OptimizedConditionGenerator,
                                OptimizingRuleConditionsGeneralizer,
                                SingleEvaluationRuleMinimalityChecker,
                                StandardConditionGenerator)
from vcdomlem.information_table import InformationTable, MissingValueType
from vcdomlem.rule_conditions import RuleConditions
from vcdomlem.unions import Union, UnionType

SYMPTOM1: int = 0
SYMPTOM2: int = 1


@pytest.fixture
def bus_table() -> InformationTable:
    return utils.create_bus_information_table()


@pytest.fixture
def checker() -> EvaluationAndCoverageStoppingConditionChecker:
    return EvaluationAndCoverageStoppingConditionChecker(EpsilonConsistencyMeasure(), 0.0)


def create_rule_conditions(
    table: InformationTable, *conditions: tuple[int, float]
) -> RuleConditions:
    """Rule conditions for the lower approximation of union "state >= 2" with
    conditions "attribute >= value" given as (attribute index, value) pairs"""
    union = Union(UnionType.AT_LEAST, 2, table)
    rule_conditions = RuleConditions(
        table,
        union.objects,
        union.lower_approximation(0.0),
        union.positive_region(0.0),
    )
    for attribute_index, value in conditions:
        rule_conditions.add_condition(at_least(table, attribute_index, value))
    return rule_conditions


def at_least(table: InformationTable, attribute_index: int, value: float) -> Condition:
    return construct_condition(
        RuleType.CERTAIN,
        RuleSemantics.AT_LEAST,
        table.get_attribute(attribute_index),
        value,
    )


def test_stopping_condition_checker(
    bus_table: InformationTable,
    checker: EvaluationAndCoverageStoppingConditionChecker,
):
    assert not checker.is_satisfied(create_rule_conditions(bus_table))
    assert checker.is_satisfied(create_rule_conditions(bus_table, (SYMPTOM1, 31.0)))
    assert not checker.is_satisfied(create_rule_conditions(bus_table, (SYMPTOM1, 27.0)))

    rule_conditions = create_rule_conditions(
        bus_table, (SYMPTOM2, 17.0), (SYMPTOM1, 31.0)
    )
    assert checker.is_satisfied_without_condition(rule_conditions, 0)
    assert not checker.is_satisfied_without_condition(rule_conditions, 1)

    relaxed = checker.copy_with_new_threshold(0.2)
    assert relaxed.threshold == 0.2 and checker.threshold == 0.0
    assert relaxed.evaluator is checker.evaluator
    # h and i are not in the positive region so they cannot be covered
    assert not relaxed.is_satisfied(create_rule_conditions(bus_table, (SYMPTOM1, 27.0)))


def test_standard_condition_generator(bus_table: InformationTable):
    generator = StandardConditionGenerator([EpsilonConsistencyMeasure(), SupportMeasure()])
    rule_conditions = create_rule_conditions(bus_table)

    condition: Condition = generator.get_best_condition([0, 1, 2, 3], rule_conditions)
    assert condition == at_least(bus_table, SYMPTOM1, 31.0)

    with pytest.raises(ElementaryConditionNotFoundError):
        generator.get_best_condition([], rule_conditions)
    with pytest.raises(InvalidValueError):
        StandardConditionGenerator([])


def test_standard_generator_restricts_used_attributes(bus_table: InformationTable):
    generator = StandardConditionGenerator([EpsilonConsistencyMeasure(), SupportMeasure()])
    rule_conditions = create_rule_conditions(bus_table, (SYMPTOM1, 27.0))

    condition: Condition = generator.get_best_condition([0, 1, 2, 3], rule_conditions)
    assert condition == at_least(bus_table, SYMPTOM1, 31.0)


def test_m4_condition_generator(bus_table: InformationTable):
    evaluators = [EpsilonConsistencyMeasure(), SupportMeasure()]
    generator = M4OptimizedConditionGenerator(evaluators)
    rule_conditions = create_rule_conditions(bus_table)

    assert generator.contains_evaluators_of_different_monotonicity_type
    assert generator.get_best_condition(
        [0, 1, 2, 3], rule_conditions
    ) == StandardConditionGenerator(evaluators).get_best_condition(
        [0, 1, 2, 3], rule_conditions
    )

    used = create_rule_conditions(bus_table, (SYMPTOM1, 27.0))
    condition: Condition = generator.get_best_condition([0, 1, 2, 3], used)
    assert condition.attribute_index == SYMPTOM2


def test_invalid_m4_evaluators():
    with pytest.raises(InvalidValueError):
        M4OptimizedConditionGenerator(
            [EpsilonConsistencyMeasure(), SupportMeasure(), EpsilonConsistencyMeasure()]
        )
    with pytest.raises(InvalidValueError):
        M4OptimizedConditionGenerator([CoverageQualityMeasure(lambda coverage: 0.0)])


def test_rule_conditions_pruners(
    bus_table: InformationTable,
    checker: EvaluationAndCoverageStoppingConditionChecker,
):
    # each condition alone is consistent
    conditions = [(SYMPTOM2, 35.0), (SYMPTOM1, 31.0)]

    pruned = AttributeOrderRuleConditionsPruner(checker).prune(
        create_rule_conditions(bus_table, *conditions)
    )
    assert pruned.conditions == [at_least(bus_table, SYMPTOM2, 35.0)]

    pruned = FIFORuleConditionsPruner(checker).prune(
        create_rule_conditions(bus_table, *conditions)
    )
    assert pruned.conditions == [at_least(bus_table, SYMPTOM1, 31.0)]

    pruned = DummyRuleConditionsPruner().prune(
        create_rule_conditions(bus_table, *conditions)
    )
    assert pruned.size() == 2


def test_pruner_keeps_necessary_conditions(
    bus_table: InformationTable,
    checker: EvaluationAndCoverageStoppingConditionChecker,
):
    rule_conditions = create_rule_conditions(
        bus_table, (SYMPTOM2, 17.0), (SYMPTOM1, 31.0)
    )

    pruned = AttributeOrderRuleConditionsPruner(checker).prune(rule_conditions)
    assert pruned.conditions == [at_least(bus_table, SYMPTOM1, 31.0)]
    with pytest.raises(TypeError):
        AttributeOrderRuleConditionsPruner(None)


def test_rule_conditions_set_pruner(bus_table: InformationTable):
    general = create_rule_conditions(bus_table, (SYMPTOM1, 31.0))
    redundant = create_rule_conditions(bus_table, (SYMPTOM2, 35.0))
    pruner = EvaluationsAndOrderRuleConditionsSetPruner(
        [SupportMeasure(), EpsilonConsistencyMeasure()]
    )

    assert pruner.prune([redundant, general], {0, 1, 2, 3}) == [general]
    assert pruner.prune([redundant, general], {2, 3}) == [general]
    assert pruner.prune([], {0}) == []
    assert DummyRuleConditionsSetPruner().prune([redundant, general], {0}) == [
        redundant,
        general,
    ]
    with pytest.raises(InvalidValueError):
        EvaluationsAndOrderRuleConditionsSetPruner([])


def test_set_pruner_keeps_order_of_necessary_rule_conditions(
    bus_table: InformationTable,
):
    first = create_rule_conditions(bus_table, (SYMPTOM2, 35.0))
    second = create_rule_conditions(bus_table, (SYMPTOM1, 35.0))
    pruner = EvaluationsAndOrderRuleConditionsSetPruner([SupportMeasure()])

    # c, d are covered only by the first one, a, b only by the second one
    assert pruner.prune([first, second], {0, 1, 2, 3}) == [first, second]


def test_rule_minimality_checker(bus_table: InformationTable):
    general = create_rule_conditions(bus_table, (SYMPTOM1, 31.0))
    specific = create_rule_conditions(bus_table, (SYMPTOM1, 31.0), (SYMPTOM2, 35.0))
    other = create_rule_conditions(bus_table, (SYMPTOM2, 35.0))
    checker = SingleEvaluationRuleMinimalityChecker(EpsilonConsistencyMeasure())

    assert checker.check([], specific)
    assert not checker.check([general], specific)
    assert checker.check([general], other)
    assert checker.filter([general, specific, other]) == [general, other]
    assert DummyRuleMinimalityChecker().filter([general, specific]) == [
        general,
        specific,
    ]


def test_missing_limiting_evaluation_is_tested_only_for_possible_rules():
    table = utils.create_table(
        {"a": [np.nan, 3.0, 1.0]}, [1, 0, 0], missing_value_type=MissingValueType.MV15
    )
    union = Union(UnionType.AT_LEAST, 1, table)
    approximation: frozenset[int] = union.upper_approximation(0.0)
    assert approximation == frozenset({0})
    evaluators = [
        RelativeCoverageOutsideApproximationMeasure(),
        CoverageInApproximationMeasure(),
    ]
    possible = RuleConditions(
        table, union.objects, approximation, approximation, rule_type=RuleType.POSSIBLE
    )
    expected: Condition = construct_condition(
        RuleType.POSSIBLE, RuleSemantics.AT_LEAST, table.get_attribute(0), MISSING_EVALUATION
    )

    assert StandardConditionGenerator(evaluators).get_best_condition([0], possible) == expected
    assert M4OptimizedConditionGenerator(evaluators).get_best_condition([0], possible) == expected

    certain = RuleConditions(table, union.objects, approximation, approximation)
    with pytest.raises(ElementaryConditionNotFoundError):
        StandardConditionGenerator(
            [EpsilonConsistencyMeasure(), SupportMeasure()]
        ).get_best_condition([0], certain)


def test_stopping_condition_checker_with_replaced_condition(
    bus_table: InformationTable,
    checker: EvaluationAndCoverageStoppingConditionChecker,
):
    rule_conditions = create_rule_conditions(
        bus_table, (SYMPTOM2, 17.0), (SYMPTOM1, 31.0)
    )

    # h and i are covered with symptom1 >= 27
    assert not checker.is_satisfied_when_replacing_condition(
        rule_conditions, 1, at_least(bus_table, SYMPTOM1, 27.0)
    )
    assert checker.is_satisfied_when_replacing_condition(
        rule_conditions, 1, at_least(bus_table, SYMPTOM1, 32.5)
    )
    assert rule_conditions.get_condition(1) == at_least(bus_table, SYMPTOM1, 31.0)


def test_optimizing_rule_conditions_generalizer(
    bus_table: InformationTable,
    checker: EvaluationAndCoverageStoppingConditionChecker,
):
    generalizer = OptimizingRuleConditionsGeneralizer(checker)

    generalized = generalizer.generalize(create_rule_conditions(bus_table, (SYMPTOM1, 40.0)))
    assert generalized.conditions == [at_least(bus_table, SYMPTOM1, 31.0)]

    # 35.0 and 30.0 keep the rule consistent, 17.8 would cover g, h, i and l
    generalized = generalizer.generalize(create_rule_conditions(bus_table, (SYMPTOM2, 39.0)))
    assert generalized.conditions == [at_least(bus_table, SYMPTOM2, 30.0)]
    assert generalized.get_indices_of_covered_objects() == [1, 2, 3]

    already_general = create_rule_conditions(bus_table, (SYMPTOM1, 31.0))
    assert generalizer.generalize(already_general).conditions == [
        at_least(bus_table, SYMPTOM1, 31.0)
    ]
    with pytest.raises(TypeError):
        OptimizingRuleConditionsGeneralizer(None)


def test_dummy_rule_conditions_generalizer(bus_table: InformationTable):
    rule_conditions = create_rule_conditions(bus_table, (SYMPTOM1, 40.0))

    assert DummyRuleConditionsGeneralizer().generalize(rule_conditions).conditions == [
        at_least(bus_table, SYMPTOM1, 40.0)
    ]


@pytest.mark.parametrize(
    "missing_value_type, expected_evaluation",
    [(MissingValueType.MV15, 3.0), (MissingValueType.MV2, MISSING_EVALUATION)],
)
def test_generalizing_missing_limiting_evaluation(
    missing_value_type: MissingValueType, expected_evaluation
):
    table = utils.create_table(
        {"a": [np.nan, 3.0, 1.0]}, [1, 1, 0], missing_value_type=missing_value_type
    )
    rule_conditions = RuleConditions(
        table, [0, 1], [0, 1], [0, 1], rule_type=RuleType.POSSIBLE
    )
    rule_conditions.add_condition(
        construct_condition(
            RuleType.POSSIBLE,
            RuleSemantics.AT_LEAST,
            table.get_attribute(0),
            MISSING_EVALUATION,
        )
    )
    checker = EvaluationAndCoverageStoppingConditionChecker(
        RelativeCoverageOutsideApproximationMeasure(), 0.0
    )

    generalized = OptimizingRuleConditionsGeneralizer(checker).generalize(rule_conditions)
    assert generalized.get_condition(0).limiting_evaluation == expected_evaluation
