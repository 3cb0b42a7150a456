"""Allow ``python -m create_rn_boilerplate``."""

from .pipeline import main

main()
