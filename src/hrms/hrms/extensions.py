from __future__ import annotations

from flask_cors import CORS
from flask_mail import Mail
from flask_socketio import SocketIO

mail = Mail()
socketio = SocketIO()
cors = CORS()
