"""
Disease prediction from symptoms.

The dataset matcher scores each condition by how many of the user's
symptoms overlap its symptom list (substring match in either direction).
When nothing matches, the generative model is asked for a short list of
plausible conditions instead.
"""
from dataclasses import dataclass, field

import config
from health_data import load_health_data, normalize_symptom, symptom_vocabulary
from llm_client import LLMError, get_default_client
from logger import logger
from prompts import disease_fallback_messages


@dataclass
class SymptomMatch:
    disease: str
    matched_symptoms: list = field(default_factory=list)
    confidence: float = 0.0

    @property
    def score(self) -> int:
        return len(self.matched_symptoms)

    def to_dict(self) -> dict:
        return {
            'disease': self.disease,
            'matchedSymptoms': list(self.matched_symptoms),
            'score': self.score,
            'confidence': self.confidence,
        }


@dataclass
class DatabaseMatch:
    matches: list

    source = 'database'

    @property
    def diseases(self) -> list:
        return [m.disease for m in self.matches]


@dataclass
class AiFallback:
    diseases: list

    source = 'ai'
    matches = ()


def normalize_query(symptoms: list) -> list:
    """Normalized, de-duplicated query tokens in their original order."""
    tokens = []
    for s in symptoms or []:
        token = normalize_symptom(s)
        if token and token not in tokens:
            tokens.append(token)
    return tokens


def score_symptoms(query: list, record_tokens: tuple) -> list:
    """Query tokens that are a substring of a record token, or contain one."""
    matched = []
    for q in query:
        for ds in record_tokens:
            if q in ds or ds in q:
                matched.append(q)
                break
    return matched


def match_symptoms(symptoms: list, records: list, top_k: int = config.TOP_K) -> list:
    """
    Rank conditions by number of distinct matched symptoms, best first.

    A disease listed on several rows appears once, with the union of the
    symptoms matched on each of its rows. Returns at most `top_k` matches;
    an empty list means nothing matched.
    """
    query = normalize_query(symptoms)
    if not query or not records or top_k <= 0:
        return []

    by_disease = {}
    for record in records:
        matched = score_symptoms(query, record.symptom_tokens)
        if not matched:
            continue
        key = normalize_symptom(record.disease)
        entry = by_disease.get(key)
        if entry is None:
            by_disease[key] = SymptomMatch(disease=record.disease, matched_symptoms=matched)
        else:
            entry.matched_symptoms.extend(s for s in matched if s not in entry.matched_symptoms)

    matches = list(by_disease.values())
    for m in matches:
        m.confidence = round(min(m.score / len(query) * 100, 100.0), 2)
    # sort is stable: ties keep dataset order
    matches.sort(key=lambda m: -m.score)
    return matches[:top_k]


def predict_with_ai(symptoms: list, client=None, vocabulary: list | None = None,
                    limit: int = config.AI_FALLBACK_LIMIT) -> list:
    """Ask the model for up to `limit` condition names. Raises LLMError."""
    client = client or get_default_client()
    messages = disease_fallback_messages(symptoms, vocabulary or [], limit)
    data = client.complete_json(messages)

    raw = data.get('possibleDiseases')
    if raw is None:
        raw = data.get('diseases')
    if not isinstance(raw, list):
        raise LLMError("LLM reply has no possibleDiseases list")

    diseases = []
    for name in raw:
        name = str(name).strip()
        if name and name.lower() not in (d.lower() for d in diseases):
            diseases.append(name)
    return diseases[:limit]


def predict_possible_diseases(symptoms: list, records: list | None = None, client=None):
    """Dataset match first; model fallback when the dataset has no match."""
    if records is None:
        records = load_health_data()

    matches = match_symptoms(symptoms, records)
    if matches:
        logger.info(f"Dataset matched {len(matches)} condition(s): {', '.join(m.disease for m in matches)}")
        return DatabaseMatch(matches)

    logger.info(f"No dataset match for {symptoms}; falling back to the model")
    diseases = predict_with_ai(symptoms, client=client, vocabulary=symptom_vocabulary(records))
    return AiFallback(diseases)
