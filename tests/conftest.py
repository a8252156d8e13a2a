import os

import pytest

import auth
import config
import health_data
import llm_client
from llm_client import LLMError

SAMPLE_DATASET = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'data', 'dataset.csv')


class FakeChatClient:
    """Answers each prompt kind with a canned JSON object."""

    def __init__(self, diseases=None, fail=False):
        self.diseases = ['Influenza', 'Viral fever'] if diseases is None else diseases
        self.fail = fail
        self.calls = []

    def complete_json(self, messages):
        prompt = messages[-1]['content']
        self.calls.append(prompt)
        if self.fail:
            raise LLMError('model unavailable')
        if 'possibleDiseases' in prompt:
            return {'possibleDiseases': list(self.diseases)}
        if 'medicationSuggestions' in prompt:
            return {'medicationSuggestions': '- **Paracetamol**', 'disclaimer': 'Consult your doctor.'}
        if 'dietChart' in prompt:
            return {'dietChart': '# Diet Plan\n- **Breakfast**: oats'}
        return {}

    def kinds(self):
        kinds = []
        for prompt in self.calls:
            if 'possibleDiseases' in prompt:
                kinds.append('fallback')
            elif 'medicationSuggestions' in prompt:
                kinds.append('medication')
            elif 'dietChart' in prompt:
                kinds.append('diet')
        return kinds


@pytest.fixture(autouse=True)
def _isolated_state(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'USERS_FILE', str(tmp_path / 'users.json'))
    monkeypatch.setattr(config, 'DATASET_PATH', SAMPLE_DATASET)
    monkeypatch.setattr(auth, 'users', {})
    monkeypatch.setattr(auth, 'ip_rate_table', {})
    health_data.clear_cache()
    yield
    health_data.clear_cache()


@pytest.fixture
def sample_records():
    return health_data.load_health_data(SAMPLE_DATASET)


@pytest.fixture
def fake_llm(monkeypatch):
    fake = FakeChatClient()
    monkeypatch.setattr(llm_client, '_default_client', fake)
    return fake


@pytest.fixture
def valid_form():
    return {
        'symptoms': 'itching, skin rash',
        'age': '34',
        'gender': 'female',
        'weight': '62.5',
        'height': '165',
        'activityLevel': 'lightly_active',
        'dietaryRestrictions': 'vegetarian',
    }
