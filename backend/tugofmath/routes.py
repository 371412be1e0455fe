from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Tug-of-Math game server!'})

@main.route('/health')
def health():
    registry = current_app.extensions['match'].registry
    return jsonify({'status': 'ok', 'rooms': len(registry)})
