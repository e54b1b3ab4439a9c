from __future__ import annotations

from sfmanifest.app.dispatcher import main


if __name__ == "__main__":
    raise SystemExit(main())
