from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.doposcuola.doposcuola.main import create_app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=bool(app.config.get("DEBUG")))
