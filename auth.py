import json
import os
import time
from datetime import datetime, timedelta, timezone
from functools import wraps

import bcrypt
import jwt
from flask import jsonify, request

import config
from logger import logger


# ----------------- Users store -----------------

def load_users():
    if os.path.exists(config.USERS_FILE):
        try:
            with open(config.USERS_FILE, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading users file: {e}")
    return {}


def save_users(users):
    with open(config.USERS_FILE, 'w', encoding='utf-8') as f:
        json.dump(users, f, indent=4)


# Initialize users
users = load_users()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def check_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))


def register_user(username: str, password: str, name: str | None = None) -> dict:
    """Create and persist a user. Raises ValueError if the username is taken."""
    if username in users:
        raise ValueError('Username already exists')
    users[username] = {
        'username': username,
        'password': hash_password(password),
        'name': name or username,
    }
    save_users(users)
    return users[username]


def authenticate(username: str, password: str) -> dict | None:
    user = users.get(username)
    if not user or not check_password(password, user['password']):
        return None
    return user


# ----------------- JWT -----------------

def generate_token(username: str):
    """Generate a JWT token valid for config.TOKEN_TTL_DAYS days."""
    return jwt.encode({
        'username': username,
        'exp': datetime.now(timezone.utc) + timedelta(days=config.TOKEN_TTL_DAYS)
    }, config.SECRET_KEY, algorithm='HS256')


def token_required(f):
    """Decorator to ensure the request carries a valid JWT token."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return jsonify({'message': 'Token is missing'}), 401

        token = auth_header.split(' ', 1)[1]
        try:
            data = jwt.decode(token, config.SECRET_KEY, algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            return jsonify({'message': 'Token has expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'message': 'Token is invalid'}), 401

        current_user = users.get(data.get('username'))
        if not current_user:
            return jsonify({'message': 'User not found'}), 401
        return f(current_user, *args, **kwargs)
    return decorated


# ----------------- Simple rate limiting -----------------

ip_rate_table = {}  # {ip: {'start': epoch, 'count': int}}


def check_rate_limit(ip: str):
    """Return True if within limit, False if exceeded."""
    now = time.time()
    rec = ip_rate_table.get(ip)
    if not rec or now - rec['start'] > config.RATE_LIMIT_WINDOW_SEC:
        # New window
        ip_rate_table[ip] = {'start': now, 'count': 1}
        return True
    if rec['count'] >= config.RATE_LIMIT_MAX:
        return False
    rec['count'] += 1
    return True


def rate_limited(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        client_ip = request.headers.get('X-Forwarded-For', request.remote_addr)
        if not check_rate_limit(client_ip):
            return jsonify({'success': False, 'error': 'Rate limit reached, try again later.'}), 429
        return f(*args, **kwargs)
    return decorated
