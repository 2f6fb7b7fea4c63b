import os
import logging

import yaml
from dotenv import load_dotenv

# -----------------------------------------------------------------------------
# Load environment variables
# -----------------------------------------------------------------------------
load_dotenv()

CONFIG_PATH = os.getenv("CONFIG_PATH", "config/config.yaml")

def load_config(path: str = CONFIG_PATH) -> dict:
    try:
        with open(path, "r") as f:
            cfg = yaml.safe_load(f)
            if not cfg:
                raise ValueError("Config file is empty or invalid.")
            return cfg
    except FileNotFoundError:
        logging.error(f"❌ Config not found at {path}")
        raise SystemExit(f"Config not found: {path}")
    except yaml.YAMLError as e:
        logging.error(f"❌ Error parsing {path}: {e}")
        raise SystemExit(f"Error parsing config: {e}")
    except Exception as e:
        logging.error(f"❌ Unexpected error loading config: {e}")
        raise SystemExit(f"Failed to load config: {e}")

config = load_config()

def get_finnhub_api_key():
    """Provider credential, read from the environment on every call."""
    return os.getenv("FINNHUB_API_KEY")

def get_database_url() -> str:
    db_cfg = config.get("database", {})
    return os.getenv("DATABASE_URL", db_cfg.get("url", "sqlite:///./stockwatch.db"))
