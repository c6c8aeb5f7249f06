from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the tile room server!'})


@main.route('/api/maps')
def list_maps():
    store = current_app.extensions['room_store']
    return jsonify([template.to_dict() for template in store.templates])
