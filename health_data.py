"""
Health knowledge base: loading and lookup of the disease dataset.

The dataset is a CSV with the header
``Disease,Description,Medication,Diets,Workout,Precautions,Symptoms``.
Medication, diet, precaution and symptom cells are comma-joined lists, so
those cells are quoted in the file.
"""
import os
import re
from dataclasses import dataclass
from functools import cached_property

import pandas as pd

import config
from logger import logger

DATASET_COLUMNS = ['disease', 'description', 'medication', 'diets', 'workout', 'precautions', 'symptoms']
COLUMN_ALIASES = {'diet': 'diets', 'precaution': 'precautions', 'medications': 'medication'}

# Cache of parsed datasets, keyed by absolute path
_DATASET_CACHE = {}


def normalize_symptom(text: str) -> str:
    """Lowercase, trim and collapse whitespace. Underscores count as spaces."""
    if not text:
        return ''
    text = str(text).replace('_', ' ').lower()
    return re.sub(r"\s+", " ", text).strip()


def split_list(cell: str) -> list:
    """Split a comma-joined cell into trimmed, non-empty items."""
    if not cell:
        return []
    return [item.strip() for item in str(cell).split(',') if item.strip()]


@dataclass(frozen=True)
class ConditionRecord:
    disease: str
    description: str = ''
    medication: str = ''
    diets: str = ''
    workout: str = ''
    precautions: str = ''
    symptoms: str = ''

    @cached_property
    def symptom_tokens(self) -> tuple:
        tokens = []
        for item in split_list(self.symptoms):
            token = normalize_symptom(item)
            if token and token not in tokens:
                tokens.append(token)
        return tuple(tokens)

    def to_dict(self) -> dict:
        return {
            'disease': self.disease,
            'description': self.description,
            'medication': self.medication,
            'diets': self.diets,
            'workout': self.workout,
            'precaution': self.precautions,
        }


def _read_records(path: str) -> list:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    df.columns = [COLUMN_ALIASES.get(c, c) for c in df.columns.str.strip().str.lower()]
    missing = [c for c in DATASET_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"dataset is missing columns: {', '.join(missing)}")

    records = []
    for row in df[DATASET_COLUMNS].itertuples(index=False):
        values = [str(v).strip() for v in row]
        if not values[0]:
            continue
        records.append(ConditionRecord(*values))
    return records


def load_health_data(path: str | None = None) -> list:
    """
    Load and cache the dataset at `path` (defaults to config.DATASET_PATH).

    Returns [] when the file cannot be read or parsed. Only successful loads
    are cached, so a later call retries a file that was missing.
    """
    path = os.path.abspath(path or config.DATASET_PATH)
    cached = _DATASET_CACHE.get(path)
    if cached is not None:
        return cached

    try:
        records = _read_records(path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read or parse the dataset file {path}: {e}")
        return []

    _DATASET_CACHE[path] = records
    logger.info(f"Health dataset loaded: {len(records)} conditions from {path}")
    return records


def clear_cache():
    _DATASET_CACHE.clear()


def search_health_data(symptoms: list, records: list | None = None) -> list:
    """Records whose symptom list contains any of `symptoms` as an exact token."""
    if records is None:
        records = load_health_data()
    wanted = {normalize_symptom(s) for s in symptoms or []}
    wanted.discard('')
    if not records or not wanted:
        return []
    return [r for r in records if wanted.intersection(r.symptom_tokens)]


def find_condition(disease: str, records: list | None = None) -> ConditionRecord | None:
    if records is None:
        records = load_health_data()
    key = normalize_symptom(disease)
    if not key:
        return None
    for record in records:
        if normalize_symptom(record.disease) == key:
            return record
    return None


def symptom_vocabulary(records: list | None = None) -> list:
    """Sorted distinct symptom tokens across the dataset."""
    if records is None:
        records = load_health_data()
    vocab = set()
    for record in records:
        vocab.update(record.symptom_tokens)
    return sorted(vocab)
