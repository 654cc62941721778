"""
Voice Chat - a single-page chat UI over hosted LLM and Whisper APIs.
Text and recorded voice go to the configured providers; history lives in memory only.
"""

import logging

from flask import Flask
from flask_cors import CORS

from config import log_event, PORT, CHAT_HISTORY_ENABLED, MAX_UPLOAD_BYTES
from routes import api
from services.ai import provider_status


def create_app() -> Flask:
    """Build the Flask app with the API blueprint registered."""
    flask_app = Flask(__name__, template_folder="templates", static_folder="static")
    flask_app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES
    CORS(flask_app)
    flask_app.register_blueprint(api)
    return flask_app


app = create_app()


def main():
    status = provider_status()
    chat_provider = status["chat_provider"]
    transcription_provider = status["transcription_provider"]
    log_event(
        logging.INFO,
        "server_startup",
        chat_provider=chat_provider,
        transcription_provider=transcription_provider,
        history_enabled=CHAT_HISTORY_ENABLED,
        port=PORT,
    )

    print(f"""
    ╔═══════════════════════════════════════════════════╗
    ║              🎙️  VOICE CHAT                        ║
    ╠═══════════════════════════════════════════════════╣
    ║   Chat:           {(chat_provider or '❌ No API Key'):<31} ║
    ║   Transcription:  {(transcription_provider or '❌ No API Key'):<31} ║
    ║   History:        {('in memory' if CHAT_HISTORY_ENABLED else 'disabled'):<31} ║
    ╠═══════════════════════════════════════════════════╣
    ║   Server: http://localhost:{PORT:<23}║
    ╚═══════════════════════════════════════════════════╝
    """)
    app.run(debug=True, port=PORT, threaded=True)


if __name__ == '__main__':
    main()
