"""Allow ``python -m structmatch``."""

from structmatch.main import main

raise SystemExit(main())
