"""
Health analysis: validate the submitted form, predict diseases, then build
medication suggestions and a diet chart for the top prediction.
"""
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from advisor import generate_diet_chart, suggest_medications
from health_data import load_health_data
from llm_client import LLMError
from logger import logger
from predictor import predict_possible_diseases

GENDERS = ('male', 'female')
ACTIVITY_LEVELS = ('sedentary', 'lightly_active', 'moderately_active', 'very_active', 'extra_active')
DEFAULT_CONDITION = 'general wellness'
GENERIC_AI_ERROR = 'An AI-related error occurred. Please check your inputs and try again.'


class HealthFormError(ValueError):
    """The submitted health form is invalid."""


class AnalysisError(RuntimeError):
    """The analysis failed; the message is safe to show to the user."""


@dataclass
class HealthForm:
    symptoms: list
    age: int
    gender: str
    weight: float
    height: float
    activity_level: str
    dietary_restrictions: str = 'None'

    @property
    def activity_level_text(self) -> str:
        return self.activity_level.replace('_', ' ')

    def patient_profile(self) -> str:
        return (f"Age: {self.age}, Gender: {self.gender}, Weight: {self.weight:g}kg, "
                f"Height: {self.height:g}cm. Activity Level: {self.activity_level_text}. "
                f"Dietary Restrictions: {self.dietary_restrictions}.")


def parse_symptoms(text) -> list:
    """Split a comma-separated symptom string; a list is accepted as-is."""
    if isinstance(text, (list, tuple)):
        items = text
    else:
        items = str(text or '').split(',')
    return [str(s).strip() for s in items if str(s).strip()]


def _number(data: dict, key: str, label: str, cast=float):
    value = data.get(key)
    if value is None or value == '':
        raise HealthFormError(f'{label} is required.')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise HealthFormError(f'{label} must be a number.')
    if not math.isfinite(number):
        raise HealthFormError(f'{label} must be a number.')
    if cast is int:
        if not number.is_integer():
            raise HealthFormError(f'{label} must be a whole number.')
        return int(number)
    return number


def validate_health_form(data: dict) -> HealthForm:
    if not isinstance(data, dict):
        raise HealthFormError('Invalid payload.')

    raw_symptoms = data.get('symptoms', '')
    if isinstance(raw_symptoms, str) and len(raw_symptoms.strip()) < 3:
        raise HealthFormError('Please enter at least one symptom.')
    symptoms = parse_symptoms(raw_symptoms)
    if not symptoms:
        raise HealthFormError('Please provide at least one symptom.')

    age = _number(data, 'age', 'Age', int)
    if age < 1:
        raise HealthFormError('Age must be at least 1.')
    if age > 120:
        raise HealthFormError('Age must be 120 or less.')

    gender = str(data.get('gender') or '').strip().lower()
    if gender not in GENDERS:
        raise HealthFormError('Please select a gender.')

    weight = _number(data, 'weight', 'Weight')
    if weight < 1:
        raise HealthFormError('Weight must be a positive number.')
    height = _number(data, 'height', 'Height')
    if height < 1:
        raise HealthFormError('Height must be a positive number.')

    activity = str(data.get('activityLevel') or '').strip().lower()
    if activity not in ACTIVITY_LEVELS:
        raise HealthFormError('Please select an activity level.')

    restrictions = str(data.get('dietaryRestrictions') or '').strip() or 'None'

    return HealthForm(symptoms=symptoms, age=age, gender=gender, weight=weight, height=height,
                      activity_level=activity, dietary_restrictions=restrictions)


def get_health_analysis(data: dict, client=None, records=None) -> dict:
    """
    Run the full analysis for a submitted form.

    Raises HealthFormError for invalid input and AnalysisError when a model
    call fails. The medication and diet calls run concurrently since both
    depend only on the predicted disease.
    """
    form = validate_health_form(data)
    if records is None:
        records = load_health_data()

    try:
        prediction = predict_possible_diseases(form.symptoms, records=records, client=client)
        predicted = prediction.diseases[0] if prediction.diseases else DEFAULT_CONDITION

        with ThreadPoolExecutor(max_workers=2) as pool:
            meds_future = pool.submit(suggest_medications, predicted, form.patient_profile(),
                                      form.symptoms, client, records)
            diet_future = pool.submit(generate_diet_chart, predicted, form, form.symptoms, client, records)
            medications = meds_future.result()
            diet_chart = diet_future.result()
    except LLMError as e:
        logger.error(f"Error in health analysis: {e}")
        raise AnalysisError(GENERIC_AI_ERROR) from e

    return {
        'diseases': list(prediction.diseases),
        'source': prediction.source,
        'medications': medications,
        'dietChart': diet_chart,
    }
