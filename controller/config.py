"""Configuration settings for the Controller server and the worker."""

import os
from common.constants import SESSION_TTL_SECONDS


DATABASE_PATH = os.environ.get("FM_DATABASE_PATH", "/tmp/files_manager/metadata.db")

FOLDER_PATH = os.environ.get("FM_FOLDER_PATH", os.environ.get("FOLDER_PATH", "/tmp/files_manager"))

CONTROLLER_HOST = os.environ.get("FM_HOST", "0.0.0.0")

CONTROLLER_PORT = int(os.environ.get("FM_PORT", "5000"))

SESSION_TTL = int(os.environ.get("FM_SESSION_TTL_SECONDS", str(SESSION_TTL_SECONDS)))

JOB_POLL_INTERVAL = float(os.environ.get("FM_JOB_POLL_INTERVAL_SECONDS", "1.0"))

JOB_MAX_ATTEMPTS = int(os.environ.get("FM_JOB_MAX_ATTEMPTS", "3"))

JOB_VISIBILITY_TIMEOUT = int(os.environ.get("FM_JOB_VISIBILITY_TIMEOUT_SECONDS", "300"))
