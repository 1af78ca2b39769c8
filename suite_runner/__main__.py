"""Allow ``python -m suite_runner``."""

from .cli import main

main()
