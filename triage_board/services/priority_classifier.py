# triage_board/services/priority_classifier.py
from typing import Iterable

from triage_board.models.patient import PriorityClass, SymptomTag
from triage_board.schemas.patient import Vitals

CRITICAL_SYMPTOMS = frozenset(
    {
        SymptomTag.CHEST_PAIN.value,
        SymptomTag.BREATHING_DIFFICULTY.value,
        SymptomTag.BLEEDING.value,
        SymptomTag.UNCONSCIOUS.value,
    }
)
URGENT_SYMPTOMS = frozenset({SymptomTag.FEVER.value, SymptomTag.PAIN.value})

PULSE_LIMIT_BPM = 120
TEMPERATURE_LIMIT_F = 103.0

# Ascending rank: critical is seen first
PRIORITY_RANK = {
    PriorityClass.CRITICAL: 1,
    PriorityClass.URGENT: 2,
    PriorityClass.NON_URGENT: 3,
}


def classify(symptoms: Iterable[SymptomTag | str], vitals: Vitals | None = None) -> PriorityClass:
    """
    Deterministic triage rule, first match wins:
    1. any critical symptom                          -> critical
    2. fever or pain, pulse > 120, temperature > 103 -> urgent
    3. otherwise                                     -> nonUrgent
    """
    tags = {getattr(s, "value", s) for s in symptoms}

    if tags & CRITICAL_SYMPTOMS:
        return PriorityClass.CRITICAL

    pulse = vitals.pulse if vitals else None
    temperature = vitals.temperature if vitals else None

    if (
        tags & URGENT_SYMPTOMS
        or (pulse is not None and pulse > PULSE_LIMIT_BPM)
        or (temperature is not None and temperature > TEMPERATURE_LIMIT_F)
    ):
        return PriorityClass.URGENT

    return PriorityClass.NON_URGENT
