#!/usr/bin/env python3
"""Resolve Authenticated through the generated module.

Run `modgen generate src` first.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from injector import Injector  # noqa: E402

from app.auth import Authenticated  # noqa: E402
from app.Gen_Session import Gen_Session  # noqa: E402

injector = Injector([Gen_Session.install])
print(f"user: {injector.get(Authenticated).user()}")
