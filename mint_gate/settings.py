"""Django settings for the NFT mint gate.


The service admits mint requests in configured phases:
- Authenticate a wallet (identity token or EOA signature)
- Check phase, supply, allowlist and lock state in one transaction
- Forward the request to the minting provider and reconcile its outcome later
"""

import os
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")

def env_bool(name, default=""):
    v = os.getenv(name, default)
    return v.lower() in ("1", "true", "yes", "on")

#######################
# Which minting provider to talk to: "immutable" (HTTP API) or "stub" (provider_stub app)
MINTING_PROVIDER = os.getenv("MINTING_PROVIDER", "stub")
PROVIDER_HTTP_TIMEOUT = int(os.getenv("PROVIDER_HTTP_TIMEOUT", "30"))

# Passport identity tokens are verified against this JWKS
IDENTITY_JWKS_URL = os.getenv("IDENTITY_JWKS_URL", "https://auth.immutable.com/.well-known/jwks.json")
IDENTITY_JWKS_CACHE_SECONDS = int(os.getenv("IDENTITY_JWKS_CACHE_SECONDS", "3600"))

# Webhook authenticity: "sns" (AWS SNS signed envelope) or "hmac" (X-Signature header)
MINT_WEBHOOK_MODE = os.getenv("MINT_WEBHOOK_MODE", "sns")
MINT_WEBHOOK_SECRET = os.getenv("MINT_WEBHOOK_SECRET", "dev-secret-change-me")

# Poll-mode reconciliation
RECONCILE_INTERVAL_SECONDS = int(os.getenv("RECONCILE_INTERVAL_SECONDS", "60"))
# A pending request the provider has never heard of is re-sent after this long
RECONCILE_RESUBMIT_AFTER_SECONDS = int(os.getenv("RECONCILE_RESUBMIT_AFTER_SECONDS", "300"))

# Sent when no metadata file exists for a token id (None => send no metadata)
DEFAULT_TOKEN_METADATA = None
#######################


# Mint configuration per environment. Times are unix seconds.
# A phase either has a fixed token id range (start_token_id/end_token_id) or
# rolls over from the previous phase's highest id (enable_token_id_roll_over).
MINT_ENVIRONMENT = os.getenv("MINT_ENVIRONMENT", "sandbox")
MINT_ENVIRONMENTS = {
    "sandbox": {
        "api_url": "https://api.sandbox.immutable.com",
        "api_key": os.getenv("SANDBOX_IMMUTABLE_API_KEY", ""),
        "chain_name": "imtbl-zkevm-testnet",
        "collection_address": "0x76bedf3f6d486922d77db2e1a43cea4bf9c22ef7",
        "allowed_topic_arn": "arn:aws:sns:us-east-2:783421985614:*",
        "metadata_dir": str(BASE_DIR / "tokens" / "metadata"),
        "max_token_supply_across_all_phases": 10000,
        "eoa_mint_message": "Sign this message to verify your wallet address",
        "mint_phases": [
            {
                "name": "Presale",
                "start_time": 1629913600,
                "end_time": 1714570314,
                "start_token_id": 6015,
                "end_token_id": 6020,
                "enable_allow_list": True,
            },
            {
                "name": "Public Sale",
                "start_time": 1714570315,
                "end_time": 1719292800,
                "max_token_supply": 5,
                "enable_token_id_roll_over": True,
                "enable_allow_list": False,
                "max_tokens_per_wallet": 25,
            },
        ],
    },
    "production": {
        "api_url": "https://api.immutable.com",
        "api_key": os.getenv("MAINNET_IMMUTABLE_API_KEY", ""),
        "chain_name": "imtbl-zkevm-mainnet",
        "collection_address": "0x88b87272649b3495d99b1702f358286b19f8c3da",
        "allowed_topic_arn": "arn:aws:sns:us-east-2:362750628221:*",
        "metadata_dir": str(BASE_DIR / "tokens" / "metadata"),
        "eoa_mint_message": "Sign this message to verify your wallet address",
        "mint_phases": [
            {
                "name": "Presale",
                "start_time": 1629913600,
                "end_time": 1714397828,
                "start_token_id": 6,
                "end_token_id": 1000,
                "enable_allow_list": True,
            },
            {
                "name": "Public Sale",
                "start_time": 1714397829,
                "end_time": 1719292800,
                "start_token_id": 2027,
                "end_token_id": 3000,
                "enable_allow_list": False,
                "max_tokens_per_wallet": 5,
            },
        ],
    },
}


INSTALLED_APPS = [
	# local apps
	"core",
	"api",
	"provider_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.middleware.common.CommonMiddleware",
]


ROOT_URLCONF = "mint_gate.urls"
TEMPLATES = []


WSGI_APPLICATION = "mint_gate.wsgi.application"


# SQLite takes the write lock at BEGIN (IMMEDIATE) so admissions serialize;
# on Postgres the per-phase gate row is locked with SELECT ... FOR UPDATE.
DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "mint_gate"),
            "USER": os.getenv("POSTGRES_USER", "mint_gate"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "mint_gate"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
            "OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
            # File-backed so threaded tests get separate connections to one database
            "TEST": {"NAME": BASE_DIR / "test_db.sqlite3"},
        }
    }


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True


DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")
ENABLE_FILE_LOGGING = env_bool("ENABLE_FILE_LOGGING")
LOG_DIR = BASE_DIR / "logs"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "[{asctime}][{levelname}][{name}]: {message}",
            "datefmt": "%Y-%m-%d %H:%M:%S",
            "style": "{",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "core": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "api": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "provider_stub": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}

if ENABLE_FILE_LOGGING:
    LOG_DIR.mkdir(exist_ok=True)
    LOGGING["handlers"]["file"] = {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "filename": str(LOG_DIR / "mint-gate.log"),
        "when": "midnight",
        "backupCount": 14,
        "formatter": "plain",
    }
    for name in ("core", "api", "provider_stub"):
        LOGGING["loggers"][name]["handlers"].append("file")
