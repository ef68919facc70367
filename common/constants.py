"""Project-wide constants (page size, thumbnail widths, file types)."""

PAGE_SIZE: int = 20

ROOT_PARENT_ID: str = "0"

FILE_TYPES = ("folder", "file", "image")
FOLDER_TYPE = "folder"
IMAGE_TYPE = "image"

THUMBNAIL_WIDTHS = (500, 250, 100)

SESSION_TTL_SECONDS: int = 24 * 60 * 60

# bcrypt only accepts passwords up to this many bytes
MAX_PASSWORD_BYTES: int = 72
