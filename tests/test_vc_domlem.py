import pytest
import utils

from vcdomlem import VCDomLEM, VCDomLEMParameters
from vcdomlem.conditions import RuleSemantics, RuleType
from vcdomlem.evaluators import EpsilonConsistencyMeasure, SupportMeasure
from vcdomlem.exceptions import InvalidValueError
from vcdomlem.induction import (AttributeOrderRuleConditionsPruner,
                                DummyRuleConditionsGeneralizer,
                                DummyRuleConditionsSetPruner,
                                EvaluationAndCoverageStoppingConditionChecker,
                                FIFORuleConditionsPruner,
                                M4OptimizedConditionGenerator,
                                OptimizingRuleConditionsGeneralizer)
from vcdomlem.information_table import InformationTable, MissingValueType
from vcdomlem.rules import Rule, RuleSetWithComputableCharacteristics
from vcdomlem.unions import Union, Unions

EXPECTED_UPWARD_RULES: list[str] = [
    "(symptom1 >= 31.0) => (state >= 2)",
    "(symptom1 >= 18.0) => (state >= 1)",
    "(symptom2 >= 17.0) => (state >= 1)",
]


@pytest.fixture
def bus_table() -> InformationTable:
    return utils.create_bus_information_table()


def test_upward_unions_certain_rules(bus_table: InformationTable):
    unions = Unions(bus_table)
    rule_sets: list[RuleSetWithComputableCharacteristics] = VCDomLEM().generate_rules(
        unions.upward_unions
    )

    assert len(rule_sets) == 1
    rule_set: RuleSetWithComputableCharacteristics = rule_sets[0]
    assert rule_set.size() == 3
    assert [str(rule) for rule in rule_set] == EXPECTED_UPWARD_RULES
    assert rule_set.learning_information_table_hash == bus_table.hash
    for rule in rule_set:
        assert rule.rule_type == RuleType.CERTAIN
        assert rule.rule_semantics == RuleSemantics.AT_LEAST


def test_m4_condition_generator_gives_the_same_rules(bus_table: InformationTable):
    evaluators = [EpsilonConsistencyMeasure(), SupportMeasure()]
    params = VCDomLEMParameters(
        condition_addition_evaluators=evaluators,
        condition_generator=M4OptimizedConditionGenerator(evaluators),
    )
    rule_set = VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)[0]

    assert [str(rule) for rule in rule_set] == EXPECTED_UPWARD_RULES


def test_only_epsilon_evaluator_and_fifo_pruner(bus_table: InformationTable):
    evaluator = EpsilonConsistencyMeasure()
    params = VCDomLEMParameters(
        condition_addition_evaluators=[evaluator],
        rule_conditions_evaluators=[evaluator],
        condition_generator=M4OptimizedConditionGenerator([evaluator]),
        rule_conditions_pruner=FIFORuleConditionsPruner,
    )
    rule_set = VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)[0]

    assert rule_set.size() >= 3
    for i in range(rule_set.size()):
        assert rule_set.get_rule_characteristics(i).epsilon == 0.0


def test_characteristics_of_induced_rules(bus_table: InformationTable):
    rule_set = VCDomLEM().generate_rules(Unions(bus_table).upward_unions)[0]
    rule_set.calculate_all_characteristics()

    first = rule_set.get_rule_characteristics(0)
    assert first.support == 4
    assert first.coverage == 4
    assert first.negative_coverage == 0
    assert first.confidence == 1.0
    assert first.epsilon == 0.0
    assert first.strength == pytest.approx(4 / 17)
    assert first.coverage_factor == pytest.approx(4 / 7)
    assert first.length == 1

    second = rule_set.get_rule_characteristics(1)
    assert second.support == 11
    assert second.coverage_factor == pytest.approx(11 / 13)

    serialized: str = rule_set.serialize("\n")
    lines: list[str] = serialized.split("\n")
    assert len(lines) == 4 and lines[-1] == ""
    assert lines[0].startswith("(symptom1 >= 31.0) => (state >= 2) [support=4, ")
    assert "confidence=1, epsilon=0]" in lines[0]


def test_rules_cover_whole_lower_approximations(bus_table: InformationTable):
    unions = Unions(bus_table)
    all_unions = unions.upward_unions + unions.downward_unions
    rule_set = VCDomLEM().generate_rules(all_unions)[0]

    for union in all_unions:
        rules = [
            rule
            for rule in rule_set
            if rule.decision.limiting_evaluation == union.limiting_decision
            and rule.rule_semantics == union.rule_semantics
        ]
        assert len(rules) > 0
        covered: set[int] = set()
        for rule in rules:
            covered |= {
                i
                for i in range(bus_table.number_of_objects)
                if rule.covers(i, bus_table)
            }
            # certain rules at threshold 0 never cover objects outside the union
            assert all(
                rule.decisions_matched_by(i, bus_table)
                for i in range(bus_table.number_of_objects)
                if rule.covers(i, bus_table)
            )
        assert union.lower_approximation(0.0) <= covered


def test_downward_rules_have_at_most_semantics(bus_table: InformationTable):
    rule_set = VCDomLEM().generate_rules(Unions(bus_table).downward_unions)[0]

    assert rule_set.size() > 0
    for rule in rule_set:
        assert rule.rule_semantics == RuleSemantics.AT_MOST
        assert " <= " in str(rule)


def test_one_rule_set_per_consistency_threshold(bus_table: InformationTable):
    params = VCDomLEMParameters(consistency_thresholds=(0.0, 0.1, 0.2))
    rule_sets = VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)

    assert len(rule_sets) == 3
    assert [str(rule) for rule in rule_sets[0]] == EXPECTED_UPWARD_RULES
    for rule_set in rule_sets:
        assert rule_set.size() > 0


def test_parallel_induction_keeps_order_of_unions(bus_table: InformationTable):
    unions = Unions(bus_table)
    all_unions = unions.upward_unions + unions.downward_unions
    sequential = VCDomLEM().generate_rules(all_unions)[0]
    parallel = VCDomLEM(VCDomLEMParameters(n_jobs=2)).generate_rules(all_unions)[0]

    assert parallel.serialize() == sequential.serialize()


def test_possible_rules(bus_table: InformationTable):
    params = VCDomLEMParameters(rule_type=RuleType.POSSIBLE)
    unions = Unions(bus_table)
    rule_set = VCDomLEM(params).generate_rules(unions.upward_unions)[0]

    assert rule_set.size() > 0
    for rule in rule_set:
        assert rule.rule_type == RuleType.POSSIBLE
    for union in unions.upward_unions:
        # h and i are inconsistent with e, f and g
        upper_approximation: frozenset[int] = union.upper_approximation(0.0)
        covered: set[int] = set()
        for rule in rule_set:
            if rule.decision.limiting_evaluation != union.limiting_decision:
                continue
            rule_covered = {
                i for i in range(bus_table.number_of_objects) if rule.covers(i, bus_table)
            }
            assert rule_covered <= upper_approximation
            covered |= rule_covered
        assert covered == upper_approximation


def test_custom_condition_separator(bus_table: InformationTable):
    params = VCDomLEMParameters(condition_separator=" AND ")
    rule_set = VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)[0]

    assert rule_set.get_rule(0).condition_separator == " AND "


def test_set_pruner_can_be_disabled(bus_table: InformationTable):
    params = VCDomLEMParameters(rule_conditions_set_pruner=DummyRuleConditionsSetPruner())
    rule_set = VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)[0]

    assert rule_set.size() >= 3


def test_empty_list_of_unions():
    rule_sets = VCDomLEM().generate_rules([])

    assert len(rule_sets) == 1
    assert rule_sets[0].size() == 0


def test_induction_times_are_measured(bus_table: InformationTable):
    inducer = VCDomLEM()
    inducer.generate_rules(Unions(bus_table).upward_unions)

    times = inducer.induction_times
    assert times.total_training_time.total_seconds() > 0
    assert times.total_training_time >= times.growing_time
    assert times.total_training_time >= times.pruning_time
    assert times.total_training_time >= times.generalizing_time


def test_invalid_parameters():
    with pytest.raises(InvalidValueError):
        VCDomLEMParameters(consistency_thresholds=())
    with pytest.raises(InvalidValueError):
        VCDomLEMParameters(consistency_thresholds=(1.5,))
    with pytest.raises(InvalidValueError):
        VCDomLEMParameters(rule_type=RuleType.APPROXIMATE)
    with pytest.raises(InvalidValueError):
        VCDomLEMParameters(n_jobs=0)
    with pytest.raises(TypeError):
        VCDomLEMParameters(rule_conditions_generalizer=None)


def test_default_parameters_depend_on_rule_type():
    certain = VCDomLEMParameters()
    possible = VCDomLEMParameters(rule_type=RuleType.POSSIBLE)

    assert isinstance(
        certain.stopping_condition_checker.evaluator, EpsilonConsistencyMeasure
    )
    assert not isinstance(
        possible.stopping_condition_checker.evaluator, EpsilonConsistencyMeasure
    )
    assert certain.allowed_negative_objects_type.value == "positive_region"
    assert possible.allowed_negative_objects_type.value == "approximation"


def test_passed_stopping_condition_checker_is_not_modified(bus_table: InformationTable):
    checker = EvaluationAndCoverageStoppingConditionChecker(
        EpsilonConsistencyMeasure(), 0.0
    )
    params = VCDomLEMParameters(
        consistency_thresholds=(0.1,),
        stopping_condition_checker=checker,
        rule_conditions_pruner=AttributeOrderRuleConditionsPruner,
    )
    VCDomLEM(params).generate_rules(Unions(bus_table).upward_unions)

    assert checker.threshold == 0.0


def test_condition_removal_evaluators_are_not_a_parameter():
    with pytest.raises(TypeError):
        VCDomLEMParameters(condition_removal_evaluators=[EpsilonConsistencyMeasure()])


def test_generalized_rules_stay_in_positive_regions(bus_table: InformationTable):
    params = VCDomLEMParameters(
        consistency_thresholds=(0.0, 0.2),
        rule_conditions_generalizer=OptimizingRuleConditionsGeneralizer,
    )
    unions = Unions(bus_table)
    all_unions = unions.upward_unions + unions.downward_unions
    rule_sets = VCDomLEM(params).generate_rules(all_unions)

    assert [str(rule) for rule in rule_sets[0]][:3] == EXPECTED_UPWARD_RULES
    for threshold, rule_set in zip((0.0, 0.2), rule_sets):
        for union in all_unions:
            covered: set[int] = set()
            for rule in _rules_for_union(rule_set, union):
                rule_covered: set[int] = _covered_objects(rule, bus_table)
                assert rule_covered <= union.positive_region(threshold)
                covered |= rule_covered
            assert union.lower_approximation(threshold) <= covered


def _covered_objects(rule: Rule, table: InformationTable) -> set[int]:
    return {i for i in range(table.number_of_objects) if rule.covers(i, table)}


def _rules_for_union(rule_set: RuleSetWithComputableCharacteristics, union: Union) -> list[Rule]:
    return [
        rule
        for rule in rule_set
        if rule.decision.limiting_evaluation == union.limiting_decision
        and rule.rule_semantics == union.rule_semantics
    ]


@pytest.mark.parametrize(
    "generalizer", [DummyRuleConditionsGeneralizer, OptimizingRuleConditionsGeneralizer]
)
@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize(
    "missing_value_type", [MissingValueType.MV2, MissingValueType.MV15]
)
def test_certain_rules_with_missing_values(
    seed: int, missing_value_type: MissingValueType, generalizer: type
):
    table = utils.create_random_table_with_missing_values(seed, missing_value_type)
    unions = Unions(table)
    all_unions = unions.upward_unions + unions.downward_unions
    thresholds = (0.0, 0.1, 0.3)
    params = VCDomLEMParameters(
        consistency_thresholds=thresholds, rule_conditions_generalizer=generalizer
    )
    rule_sets = VCDomLEM(params).generate_rules(all_unions)

    assert len(rule_sets) == len(thresholds)
    for threshold, rule_set in zip(thresholds, rule_sets):
        for union in all_unions:
            positive_region: frozenset[int] = union.positive_region(threshold)
            covered: set[int] = set()
            for rule in _rules_for_union(rule_set, union):
                rule_covered: set[int] = _covered_objects(rule, table)
                assert rule_covered <= positive_region
                covered |= rule_covered
            assert union.lower_approximation(threshold) <= covered


@pytest.mark.parametrize(
    "generalizer", [DummyRuleConditionsGeneralizer, OptimizingRuleConditionsGeneralizer]
)
@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize(
    "missing_value_type", [MissingValueType.MV2, MissingValueType.MV15]
)
def test_possible_rules_with_missing_values(
    seed: int, missing_value_type: MissingValueType, generalizer: type
):
    table = utils.create_random_table_with_missing_values(seed, missing_value_type)
    unions = Unions(table)
    all_unions = unions.upward_unions + unions.downward_unions
    params = VCDomLEMParameters(
        consistency_thresholds=(0.0, 0.1),
        rule_type=RuleType.POSSIBLE,
        rule_conditions_generalizer=generalizer,
    )
    rule_sets = VCDomLEM(params).generate_rules(all_unions)

    for rule_set in rule_sets:
        for union in all_unions:
            upper_approximation: frozenset[int] = union.upper_approximation(0.0)
            covered: set[int] = set()
            for rule in _rules_for_union(rule_set, union):
                rule_covered: set[int] = _covered_objects(rule, table)
                assert rule_covered <= upper_approximation
                covered |= rule_covered
            assert covered == upper_approximation
