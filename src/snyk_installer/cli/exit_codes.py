"""Exit codes of the snyk-installer CLI."""

EXIT_SUCCESS = 0
EXIT_ISSUES_FOUND = 1
EXIT_INVALID_USAGE = 3
EXIT_INSTALL_FAILURE = 4
