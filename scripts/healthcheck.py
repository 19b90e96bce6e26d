#!/usr/bin/env python
"""Container healthcheck: check /healthz and fail unless search is usable."""

import json
import os
import sys
from urllib import request, error


def check_health(base_url: str, timeout: float = 5.0) -> int:
    target = f"{base_url.rstrip('/')}/healthz"
    try:
        with request.urlopen(target, timeout=timeout) as resp:
            payload = json.loads(resp.read().decode("utf-8") or "{}")
    except error.HTTPError as exc:
        # 503 still carries the checks body
        try:
            payload = json.loads(exc.read().decode("utf-8") or "{}")
        except ValueError:
            payload = {}
        print(f"healthz returned {exc.code}: {payload.get('checks', {})}", file=sys.stderr)
        return 1
    except (error.URLError, ValueError) as exc:
        print(f"healthz unreachable: {exc}", file=sys.stderr)
        return 1

    return 0 if payload.get("status") == "ok" else 1


def main() -> int:
    host = os.getenv("HEALTHCHECK_HOST", "127.0.0.1")
    port = os.getenv("PORT", os.getenv("APP_PORT", "5000"))
    return check_health(f"http://{host}:{port}")


if __name__ == "__main__":
    sys.exit(main())
