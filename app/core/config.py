import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/restaurant_db")
GENERATE_SCHEMAS = os.getenv("GENERATE_SCHEMAS", "true").lower() in ("1", "true", "yes")

# Application Metadata
PROJECT_NAME = "Restaurant Stock Service"
VERSION = "1.0.0"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Inventory defaults
DEFAULT_LOW_STOCK_ALERT = int(os.getenv("DEFAULT_LOW_STOCK_ALERT", 5)) # Alert threshold for newly tracked items
DAILY_RESET_REASON = "Begin of the day"
MIN_REASON_LENGTH = 3

# Stock history pagination
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100
