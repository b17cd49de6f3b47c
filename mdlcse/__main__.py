"""Allow ``python -m mdlcse``."""

from .main import main

raise SystemExit(main())
