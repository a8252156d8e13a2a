from flask import Flask, request, jsonify
from flask_cors import CORS

import config
from analysis import AnalysisError, HealthFormError, get_health_analysis, parse_symptoms
from auth import authenticate, generate_token, rate_limited, register_user, token_required
from health_data import find_condition, load_health_data, search_health_data
from llm_client import LLMError
from logger import logger
from predictor import predict_possible_diseases

app = Flask(__name__)
CORS(app, supports_credentials=True)


@app.route('/test', methods=['GET'])
def test():
    return jsonify({'status': 'Flask server is running', 'conditions': len(load_health_data())})


# ----------------- Auth -----------------

@app.route('/api/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    name = data.get('name', username)

    if not username or not password:
        return jsonify({"success": False, "message": "Username and password are required"}), 400

    try:
        user = register_user(username, password, name)
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify({
        "success": True,
        "message": "Registration successful",
        "token": generate_token(username),
        "name": user['name']
    }), 201


@app.route('/api/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')

    if not all([username, password]):
        return jsonify({"success": False, "message": "Username and password are required"}), 400

    user = authenticate(username, password)
    if not user:
        return jsonify({"success": False, "message": "Invalid credentials"}), 401

    return jsonify({
        "success": True,
        "message": "Login successful",
        "name": user['name'],
        "token": generate_token(username)
    })


# ----------------- Health analysis -----------------

@app.route('/api/analyze', methods=['POST'])
@token_required
@rate_limited
def analyze(current_user):
    data = request.get_json(silent=True)
    logger.info(f"Health analysis requested by {current_user['username']}")
    try:
        result = get_health_analysis(data)
    except HealthFormError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    except AnalysisError as e:
        return jsonify({'success': False, 'error': str(e)}), 500
    return jsonify({'success': True, 'data': result})


@app.route('/api/predict', methods=['POST'])
@token_required
@rate_limited
def predict(current_user):
    data = request.get_json(silent=True) or {}
    symptoms = parse_symptoms(data.get('symptoms'))
    if not symptoms:
        return jsonify({'success': False, 'error': 'Please provide at least one symptom.'}), 400

    try:
        prediction = predict_possible_diseases(symptoms)
    except LLMError:
        return jsonify({'success': False, 'error': 'Could not predict a disease at this time. Please try again later.'}), 500

    return jsonify({
        'success': True,
        'diseases': prediction.diseases,
        'source': prediction.source,
        'matches': [m.to_dict() for m in prediction.matches],
    })


# ----------------- Knowledge base tools -----------------

@app.route('/api/tool/condition_info', methods=['POST'])
@token_required
def tool_condition_info(current_user):
    """Knowledge base entries whose symptom list contains any given symptom."""
    data = request.get_json(silent=True) or {}
    symptoms = parse_symptoms(data.get('symptoms'))
    if not symptoms:
        return jsonify({'error': 'Missing symptoms'}), 400
    return jsonify({'results': [r.to_dict() for r in search_health_data(symptoms)]})


@app.route('/api/conditions/<path:name>', methods=['GET'])
@token_required
def condition_detail(current_user, name):
    record = find_condition(name)
    if record is None:
        return jsonify({'error': 'Condition not found'}), 404
    result = record.to_dict()
    result['symptoms'] = list(record.symptom_tokens)
    return jsonify(result)


if __name__ == '__main__':
    logger.info(f"Starting Flask server on port {config.SERVER_PORT}...")
    logger.info(f"DeepSeek API Key loaded: {'Yes' if config.DEEPSEEK_API_KEY != 'YOUR_DEEPSEEK_API_KEY' else 'No - check .env file'}")
    load_health_data()
    app.run(host=config.SERVER_HOST, port=config.SERVER_PORT, debug=config.SERVER_DEBUG)
