from itertools import chain, combinations

import pytest

from triage_board.models.patient import PriorityClass, SymptomTag
from triage_board.schemas.patient import Vitals
from triage_board.services.priority_classifier import CRITICAL_SYMPTOMS, URGENT_SYMPTOMS, classify

ALL_TAGS = list(SymptomTag)
PULSES = [None, 40, 120, 121, 180]
TEMPERATURES = [None, 97.0, 103.0, 103.1, 105.0]


def all_symptom_sets():
    return chain.from_iterable(combinations(ALL_TAGS, n) for n in range(len(ALL_TAGS) + 1))


@pytest.mark.parametrize(
    "symptoms, pulse, temperature, expected",
    [
        ([], 80, 98.6, PriorityClass.NON_URGENT),
        ([SymptomTag.CHEST_PAIN], 80, 98.6, PriorityClass.CRITICAL),
        ([SymptomTag.BLEEDING, SymptomTag.PAIN], 80, 98.6, PriorityClass.CRITICAL),
        ([SymptomTag.FEVER], 80, 98.6, PriorityClass.URGENT),
        ([SymptomTag.PAIN], None, None, PriorityClass.URGENT),
        ([], 121, 98.6, PriorityClass.URGENT),
        ([], 120, 98.6, PriorityClass.NON_URGENT),
        ([], 80, 103.5, PriorityClass.URGENT),
        ([], 80, 103.0, PriorityClass.NON_URGENT),
        ([], None, None, PriorityClass.NON_URGENT),
    ],
)
def test_classify_rules(symptoms, pulse, temperature, expected):
    assert classify(set(symptoms), Vitals(pulse=pulse, temperature=temperature)) == expected


def test_unconscious_is_always_critical():
    for symptoms in all_symptom_sets():
        if SymptomTag.UNCONSCIOUS not in symptoms:
            continue
        for pulse in PULSES:
            for temperature in TEMPERATURES:
                vitals = Vitals(pulse=pulse, temperature=temperature)
                assert classify(set(symptoms), vitals) == PriorityClass.CRITICAL


def test_no_signals_is_non_urgent():
    flagged = CRITICAL_SYMPTOMS | URGENT_SYMPTOMS
    for symptoms in all_symptom_sets():
        if {s.value for s in symptoms} & flagged:
            continue
        for pulse in [p for p in PULSES if p is None or p <= 120]:
            for temperature in [t for t in TEMPERATURES if t is None or t <= 103]:
                vitals = Vitals(pulse=pulse, temperature=temperature)
                assert classify(set(symptoms), vitals) == PriorityClass.NON_URGENT


def test_classify_accepts_raw_tag_strings_and_missing_vitals():
    assert classify({"breathingDifficulty"}) == PriorityClass.CRITICAL
    assert classify({"fever"}, None) == PriorityClass.URGENT
    assert classify(set()) == PriorityClass.NON_URGENT
