# /run.py
import os

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from aloa import create_app  # noqa: E402
from aloa.extensions import socketio  # noqa: E402

app = create_app()

if __name__ == '__main__':
    socketio.run(app, host=os.environ.get('HOST', '127.0.0.1'), port=int(os.environ.get('PORT', 5000)),
                 debug=app.debug, allow_unsafe_werkzeug=True)
