"""Constants used throughout the Streamwave application."""

# File extensions
MP3_EXTENSION = ".mp3"
WAV_EXTENSION = ".wav"

# Temporary file naming
TEMP_NAME_CHARS = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
)
TEMP_NAME_LENGTH = 16

# Copy buffer for payload streaming
COPY_BLOCK_SIZE = 64 * 1024

# Listing layout
INDENT_LEVEL_1 = "  "
INDENT_LEVEL_2 = "    "

# Status markers
FAIL_MSG = "failed!"
SUCCESS_MSG = "done!"
FORMAT_ERROR_MSG = "invalid audio format"

# Configuration
DEFAULT_CONFIG_FILENAME = "streamwave.yaml"
CONFIG_ENV_VAR = "STREAMWAVE_CONFIG"
LOG_FILENAME = "streamwave.log"
