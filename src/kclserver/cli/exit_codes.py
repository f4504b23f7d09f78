"""Exit codes for the kclserver CLI."""

EXIT_SUCCESS = 0
EXIT_INVALID_USAGE = 3
EXIT_BOOTSTRAP_FAILURE = 4
