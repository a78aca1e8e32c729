from flask import Blueprint, jsonify
from relay import registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return 'Hello World!'

@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'sessions': len(registry)})
