"""
Prompt builders for the three model calls: disease fallback, medication
suggestion and diet chart. Each returns a chat `messages` list.
"""
from health_data import ConditionRecord

DISCLAIMER = (
    "These suggestions are not a substitute for professional medical advice. "
    "Always consult with your healthcare provider before taking any medication."
)

MEDICAL_ASSISTANT_SYSTEM = (
    "You are a careful medical assistant. You answer only with the JSON object "
    "that is requested, without markdown fences or commentary."
)


def _record_block(record: ConditionRecord | None) -> str:
    if record is None:
        return "No knowledge base entry was found for this condition."
    return "\n".join([
        f"- Disease: {record.disease}",
        f"- Description: {record.description or 'n/a'}",
        f"- Medication: {record.medication or 'n/a'}",
        f"- Diets: {record.diets or 'n/a'}",
        f"- Workout: {record.workout or 'n/a'}",
        f"- Precautions: {record.precautions or 'n/a'}",
    ])


def disease_fallback_messages(symptoms: list, vocabulary: list, limit: int) -> list:
    vocab_text = ", ".join(vocabulary) if vocabulary else "(not available)"
    prompt = f"""Identify possible diseases based on a user's symptoms.

The user's symptoms did not match any entry of our knowledge base directly.
For reference, these are the symptoms our knowledge base knows about:
{vocab_text}

User symptoms: {", ".join(symptoms)}

Return at most {limit} plausible condition names, most likely first, as
{{"possibleDiseases": ["<condition>", ...]}}"""
    return [
        {"role": "system", "content": MEDICAL_ASSISTANT_SYSTEM},
        {"role": "user", "content": prompt},
    ]


def medication_messages(disease: str, patient_profile: str, symptoms: list,
                        record: ConditionRecord | None) -> list:
    prompt = f"""You are a medical expert specializing in medication recommendations.

Knowledge base entry for the predicted disease:
{_record_block(record)}

1. If the knowledge base entry lists medications, use exactly those medications.
2. Otherwise suggest common over-the-counter options appropriate for '{disease}'.
3. Format the suggestions as a clean Markdown bulleted list. Each medication should be bolded.

Predicted disease: {disease}
Symptoms: {", ".join(symptoms)}
Patient Profile: {patient_profile}

Answer as {{"medicationSuggestions": "<markdown list>", "disclaimer": "<disclaimer>"}}.
The disclaimer must read exactly: {DISCLAIMER}"""
    return [
        {"role": "system", "content": MEDICAL_ASSISTANT_SYSTEM},
        {"role": "user", "content": prompt},
    ]


def diet_chart_messages(disease: str, profile, symptoms: list, record: ConditionRecord | None) -> list:
    prompt = f"""You are a registered dietitian creating personalized diet charts.

Knowledge base guideline for the condition (generic, adapt it):
{_record_block(record)}

Generate a HIGHLY PERSONALIZED 7-day diet chart for this user.
- Adjust caloric intake and macronutrients to Age ({profile.age}), Gender ({profile.gender}), Weight ({profile.weight:g}kg), Height ({profile.height:g}cm) and Activity Level ({profile.activity_level_text}).
- STRICTLY ADHERE to the Dietary Restrictions: {profile.dietary_restrictions}.

User information:
- Predicted Condition: {disease}
- Symptoms: {", ".join(symptoms)}

Create meal suggestions for every day (Breakfast, Lunch, Dinner, Snacks).
Also include a personalized workout plan and specific precautions.

Formatting:
- Markdown, with a main heading per section ("Diet Plan", "Workout Routine", "Precautions").
- Under each day, one bolded bullet point per meal.
- No introductory or concluding text.

Answer as {{"dietChart": "<markdown>"}}"""
    return [
        {"role": "system", "content": MEDICAL_ASSISTANT_SYSTEM},
        {"role": "user", "content": prompt},
    ]
