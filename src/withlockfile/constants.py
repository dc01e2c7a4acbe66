"""Constants for withlockfile."""

# Lock acquisition: 300 attempts one second apart (5 minute ceiling)
LOCK_RETRY_ATTEMPTS = 300
LOCK_RETRY_INTERVAL = 1.0

# Byte range locked in the lock file
LOCK_RANGE_OFFSET = 0
LOCK_RANGE_LENGTH = 1

# Windows error code reported when the lock stays busy
ERROR_LOCK_VIOLATION = 33

USAGE = "usage: withlockfile <lockfile> <command> [args..]"
