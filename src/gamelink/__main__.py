from __future__ import annotations

from gamelink.ui.cli import run

run()
