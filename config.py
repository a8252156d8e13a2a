import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# =========================
# CONFIGURABLE PARAMETERS
# =========================
"""
All configurable parameters grouped here. Every value can be overridden
from the environment or a local .env file.
"""
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Server
SERVER_HOST = os.getenv('SERVER_HOST', '0.0.0.0')
SERVER_PORT = int(os.getenv('SERVER_PORT', '5050'))
SERVER_DEBUG = os.getenv('SERVER_DEBUG', 'false').lower() in ('1', 'true', 'yes')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

# Secret key for JWT
SECRET_KEY = os.getenv('SECRET_KEY', 'your-secret-key')
TOKEN_TTL_DAYS = 7

# Files
USERS_FILE = os.getenv('USERS_FILE', 'users.json')
DATASET_PATH = os.getenv('DATASET_PATH', os.path.join(BASE_DIR, 'data', 'dataset.csv'))

# DeepSeek (any OpenAI-compatible chat completions endpoint works)
DEEPSEEK_API_KEY = os.getenv('DEEPSEEK_API_KEY', 'YOUR_DEEPSEEK_API_KEY')
DEEPSEEK_URL = os.getenv('DEEPSEEK_URL', 'https://api.deepseek.com/v1/chat/completions')
DEEPSEEK_MODEL = os.getenv('DEEPSEEK_MODEL', 'deepseek-chat')
DS_TEMPERATURE = 0.3
DS_MAX_TOKENS = 2000
DS_TOP_P = 0.9
DS_TIMEOUT = 120

# Matching
TOP_K = 5  # max diseases returned by the dataset matcher
AI_FALLBACK_LIMIT = 5  # max diseases requested from the model when nothing matches

# Rate limiting
RATE_LIMIT_WINDOW_SEC = 12 * 60 * 60  # 12 hours
RATE_LIMIT_MAX = 100
