from watchparty import create_app, socketio
from watchparty.services.bets.scheduler import start_settlement_loop

app = create_app()

if __name__ == '__main__':
    start_settlement_loop(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'], debug=app.config.get('DEBUG', False),
                 allow_unsafe_werkzeug=True)
