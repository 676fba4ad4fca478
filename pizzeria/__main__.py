from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "pizzeria.app:app",
        host=os.getenv("PIZZERIA_HOST", "0.0.0.0"),
        port=int(os.getenv("PIZZERIA_PORT", "3333")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
