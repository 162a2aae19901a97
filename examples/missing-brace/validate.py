import sys
from pathlib import Path

import requests

API = "http://127.0.0.1:3000"  # Update to match `inoforge serve`
SKETCH = Path(__file__).with_name("missing-brace.ino").read_text()

try:
    response = requests.post(
        f"{API}/compile/demo",
        json={"code": SKETCH, "board": "Arduino Uno"},
        timeout=10,
    )
except requests.RequestException as e:
    print(f"[FAIL] Could not reach inoforge API: {e}")
    sys.exit(1)

body = response.json()
errors = body.get("errors", [])
for error in errors:
    print(f"[INFO] {error}")

if response.status_code == 200 and not body.get("success") and any("braces" in e for e in errors):
    print("[PASS] Unbalanced braces reported")
    sys.exit(0)

print("[FAIL] Expected an unbalanced-braces error")
sys.exit(1)
