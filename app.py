from src.hrms.hrms.extensions import socketio
from src.hrms.hrms.main import create_app

app = create_app()

if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=int(app.config.get("PORT", 5000)), debug=app.config["DEBUG"])
