from flask import Blueprint

main = Blueprint('main', __name__)

@main.route('/')
def index():
    # Liveness probe
    return 'Lobby Server Running', 200, {'Content-Type': 'text/plain; charset=utf-8'}
