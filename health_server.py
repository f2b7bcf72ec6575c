"""
Keep-alive HTTP endpoint for hosting platforms that expect a web port.
"""

import logging
import os
from threading import Thread
from typing import Optional

from flask import Flask

logger = logging.getLogger(__name__)

app = Flask(__name__)


@app.route('/')
def home():
    return {"status": "Bot is running!"}, 200


@app.route('/health')
def health():
    return {"status": "healthy"}, 200


def run_server(port: Optional[int] = None):
    port = port or int(os.getenv('PORT', '3000'))
    logger.info(f"Health check server listening on port {port}")
    app.run(host='0.0.0.0', port=port)


def start_in_background(port: Optional[int] = None) -> Thread:
    """Start the health server in a daemon thread."""
    thread = Thread(target=run_server, args=(port,), daemon=True)
    thread.start()
    return thread
