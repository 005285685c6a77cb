from flask import Blueprint, jsonify, request

from .catalog import build_catalog

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return 'backend is running'


@main.route('/api/health')
def health():
    return jsonify({'ok': True})


@main.route('/api/catalog')
def catalog():
    sport = (request.args.get('sport') or 'soccer').lower()
    return jsonify(build_catalog(sport))
