"""Allow ``python -m devsetup``."""

from .pipeline import main

main()
