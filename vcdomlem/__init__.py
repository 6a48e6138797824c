"""
Package implementing VC-DomLEM, a sequential covering algorithm inducing decision
rules from data with ordinal decisions, within Variable Consistency Dominance-based
Rough Set Approach.

Rules are induced for upward and downward unions of ordered decision classes from
their lower (certain rules) or upper (possible rules) approximations.
"""
from vcdomlem._induction import RuleInductionTimes, VCDomLEM
from vcdomlem._model import VCDomLEMModel
from vcdomlem._params import VCDomLEMParameters
from vcdomlem.classification import SimpleRuleClassifier
from vcdomlem.information_table import InformationTable
from vcdomlem.rules import (Rule, RuleSet, RuleSetWithCharacteristics,
                            RuleSetWithComputableCharacteristics)
from vcdomlem.unions import Union, Unions

__all__ = [
    "VCDomLEM",
    "VCDomLEMModel",
    "VCDomLEMParameters",
    "RuleInductionTimes",
    "SimpleRuleClassifier",
    "InformationTable",
    "Union",
    "Unions",
    "Rule",
    "RuleSet",
    "RuleSetWithCharacteristics",
    "RuleSetWithComputableCharacteristics",
]
