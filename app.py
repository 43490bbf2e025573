from flask import Flask, request, Response

import logging
from logging.config import dictConfig

from tracked_defaults import config
from tracked_defaults.datastore import DataStore
from tracked_defaults.parser import CommandParser
from tracked_defaults.tracking import TrackedStore

from tracked_defaults.executor import Executor

app = Flask(__name__)

# configure logging
dictConfig({
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }
    },
    'handlers': {
        'default': {
            'class': 'logging.StreamHandler',
            'formatter': 'default'
        }
    },
    'root': {
        'level': config.LOG_LEVEL,
        'handlers': ['default']
    }
})
logger = logging.getLogger(__name__)


def build_executor() -> Executor:
    data_store = DataStore()
    tracked_store = TrackedStore(data_store)
    return Executor(data_store, CommandParser(), tracked_store)

executor = build_executor()

def _no_command() -> Response:
    return Response("ERROR: No command provided", status=400, mimetype='text/plain')

@app.route("/", methods=["POST"])
def command():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _no_command()
    cmd = payload.get("command")
    if not isinstance(cmd, str) or not cmd.strip():
        return _no_command()
    cmd = cmd.strip()
    logger.info(f"Received command: {cmd}")
    result = executor.execute(cmd)
    logger.info(f"Command result: {result}")
    return Response(result, mimetype='text/plain')

if __name__ == "__main__":
    app.run(host=config.HOST, port=config.PORT, debug=True, use_reloader=False)
