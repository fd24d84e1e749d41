from flask import Blueprint

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return 'Realtime game server is running'


@main.route('/health')
def health():
    # Liveness probe for the hosting platform
    return 'ok'
