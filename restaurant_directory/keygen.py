from __future__ import annotations

import secrets
from pathlib import Path

_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"


def generate_secret(num_bytes: int = 64) -> str:
    return secrets.token_hex(num_bytes)


def append_to_env(secret: str, path: Path = _ENV_PATH, expires_in: str = "24h") -> Path:
    with path.open("a", encoding="utf-8") as fh:
        fh.write(f"JWT_SECRET={secret}\nJWT_EXPIRES_IN={expires_in}\n")
    return path


if __name__ == "__main__":
    secret = generate_secret()
    env_path = append_to_env(secret)
    print(f"JWT secret generated and appended to {env_path}")
    print("Keep .env out of version control and set the same JWT_SECRET on your host.")
