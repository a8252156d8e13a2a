"""
Medication suggestions and personalized diet charts for a predicted disease.
"""
from health_data import find_condition
from llm_client import LLMError, get_default_client
from logger import logger
from prompts import DISCLAIMER, diet_chart_messages, medication_messages


def suggest_medications(disease: str, patient_profile: str, symptoms: list, client=None, records=None) -> dict:
    """Return {'suggestions': markdown, 'disclaimer': text}. Raises LLMError."""
    client = client or get_default_client()
    record = find_condition(disease, records)
    if record is None:
        logger.info(f"No knowledge base entry for '{disease}', medication suggestion without context")

    data = client.complete_json(medication_messages(disease, patient_profile, symptoms, record))
    suggestions = data.get('medicationSuggestions') or data.get('suggestions')
    if isinstance(suggestions, list):
        suggestions = "\n".join(f"- **{str(s).strip()}**" for s in suggestions if str(s).strip())
    if not suggestions or not isinstance(suggestions, str):
        raise LLMError("LLM reply has no medicationSuggestions")

    disclaimer = data.get('disclaimer')
    if not isinstance(disclaimer, str) or not disclaimer.strip():
        disclaimer = DISCLAIMER
    return {'suggestions': suggestions.strip(), 'disclaimer': disclaimer.strip()}


def generate_diet_chart(disease: str, profile, symptoms: list, client=None, records=None) -> str:
    """Markdown 7-day diet chart with workout routine and precautions. Raises LLMError."""
    client = client or get_default_client()
    record = find_condition(disease, records)

    data = client.complete_json(diet_chart_messages(disease, profile, symptoms, record))
    chart = data.get('dietChart')
    if not isinstance(chart, str) or not chart.strip():
        raise LLMError("LLM reply has no dietChart")
    return chart.strip()
