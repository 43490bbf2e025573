from dotenv import load_dotenv
import os

load_dotenv()

# Reserved namespace for derived timestamp keys. Callers sharing a database
# must agree on it and never write keys starting with it directly.
TRACKING_KEY_PREFIX = os.getenv("TRACKING_KEY_PREFIX", "__tracking_timestamp__:")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "6380"))
