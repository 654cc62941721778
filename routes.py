"""
Flask routes for the Voice Chat API.
"""

import re
import logging

from flask import Blueprint, Response, request, jsonify, render_template

from config import log_event
from models import InvalidRequest, EmptyReply, TranscriptionFailed
from services.validation import parse_chat_body, parse_messages_field
from services.ai import provider_status
from services.history import (
    history_enabled,
    get_conversation,
    list_conversations,
    group_by_date,
    export_conversation,
    clear_history,
)
from services.processing import process_chat, process_voice_chat

# Create blueprint
api = Blueprint('api', __name__)


def _optional_id(value):
    value = (value or "").strip()
    return value or None


@api.app_errorhandler(413)
def upload_too_large(error):
    """JSON body for uploads over MAX_CONTENT_LENGTH."""
    log_event(logging.WARNING, "api_upload_too_large", content_length=request.content_length)
    return jsonify({"error": "Audio file too large"}), 413


# --- PAGE ROUTES ---

@api.route('/')
def index():
    """Serve the chat interface."""
    return render_template('index.html', history_enabled=history_enabled())


@api.route('/health')
def health():
    """Health check endpoint."""
    status = provider_status()
    return jsonify({
        "status": "ok",
        "chat_provider": status["chat_provider"],
        "transcription_provider": status["transcription_provider"],
        "history_enabled": history_enabled(),
    })


# --- CHAT ROUTES ---

@api.route('/api/chat', methods=['POST'])
def chat():
    """Answer a text conversation."""
    body = request.get_json(silent=True)
    try:
        messages = parse_chat_body(body)
        result = process_chat(messages, _optional_id((body or {}).get("conversation_id")))
    except InvalidRequest as e:
        log_event(logging.WARNING, "api_chat_invalid", details=len(e.details))
        return jsonify({"error": e.message, "details": e.details}), 400
    except EmptyReply as e:
        return jsonify({"error": str(e)}), 500
    except Exception as e:
        log_event(logging.ERROR, "api_chat_error", error=str(e))
        return jsonify({"error": str(e) or "Error processing request"}), 500

    return jsonify(result)


@api.route('/api/voice-chat', methods=['POST'])
def voice_chat():
    """Transcribe an audio recording and answer it."""
    audio_file = request.files.get('audio')
    log_event(
        logging.INFO,
        "api_voice_chat",
        form_keys=",".join(list(request.form.keys()) + list(request.files.keys())),
        filename=audio_file.filename if audio_file else None,
        content_type=audio_file.mimetype if audio_file else None,
    )

    try:
        audio_data = audio_file.read() if audio_file else None
        prev_messages = parse_messages_field(request.form.get('messages'))
        result = process_voice_chat(
            audio_data,
            audio_file.filename if audio_file else "recording.webm",
            prev_messages,
            _optional_id(request.form.get('conversation_id')),
        )
    except InvalidRequest as e:
        return jsonify({"error": e.message, "details": e.details}), 400
    except TranscriptionFailed as e:
        return jsonify({"error": e.error, "detail": e.detail}), 500
    except Exception as e:
        log_event(logging.ERROR, "api_voice_chat_error", error=str(e))
        return jsonify({"error": str(e) or "Error processing voice chat"}), 500

    return jsonify(result)


# --- HISTORY ROUTES ---

@api.route('/api/conversations', methods=['GET'])
def conversations():
    """Conversations grouped by date for the sidebar."""
    if not history_enabled():
        return jsonify({"enabled": False, "groups": []})

    groups = group_by_date(list_conversations())
    return jsonify({
        "enabled": True,
        "groups": [
            {"name": name, "conversations": [c.summary() for c in items]}
            for name, items in groups.items()
        ],
    })


@api.route('/api/conversations', methods=['DELETE'])
def delete_conversations():
    """Forget every conversation."""
    clear_history()
    return jsonify({"status": "cleared"})


@api.route('/api/conversations/<conversation_id>', methods=['GET'])
def conversation_detail(conversation_id):
    conversation = get_conversation(conversation_id)
    if conversation is None:
        return jsonify({"error": "Conversation not found"}), 404

    data = conversation.summary()
    data["messages"] = [
        {"role": m.role, "content": m.content, "timestamp": m.timestamp}
        for m in conversation.messages
    ]
    return jsonify(data)


@api.route('/api/conversations/<conversation_id>/export')
def export(conversation_id):
    """Download a conversation as plain text."""
    conversation = get_conversation(conversation_id)
    if conversation is None:
        return jsonify({"error": "Conversation not found"}), 404

    slug = re.sub(r"[^a-z0-9]+", "-", conversation.title.lower()).strip("-") or conversation.id
    return Response(
        export_conversation(conversation),
        mimetype="text/plain",
        headers={"Content-Disposition": f"attachment; filename={slug}.txt"}
    )
