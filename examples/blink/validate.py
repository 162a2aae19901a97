import base64
import sys
from pathlib import Path

import requests

API = "http://127.0.0.1:3000"  # Update to match `inoforge serve`
SKETCH = Path(__file__).with_name("blink.ino").read_text()

payload = {"code": SKETCH, "board": "ESP32 Dev Module"}

try:
    status = requests.get(f"{API}/compile", timeout=5).json()
except requests.RequestException as e:
    print(f"[FAIL] Could not reach inoforge API: {e}")
    sys.exit(1)

# Real compile when a service is configured, otherwise the offline demo.
route = "/compile" if status["serviceOnline"] else "/compile/demo"
print(f"[INFO] Service configured: {status['serviceConfigured']}, online: {status['serviceOnline']}")
print(f"[INFO] Posting blink.ino to {route}")

response = requests.post(f"{API}{route}", json=payload, timeout=330)
body = response.json()

for line in body.get("output", []):
    print(f"[INFO] {line}")

passed = True

if response.status_code != 200:
    print(f"[FAIL] Expected status 200, got {response.status_code}")
    passed = False

if not body.get("success"):
    print(f"[FAIL] Compilation failed: {body.get('errors')}")
    passed = False
elif len(base64.b64decode(body["binary"])) == 0:
    print("[FAIL] Empty binary")
    passed = False
else:
    print(f"[PASS] Binary size: {body['size']} bytes")

if passed:
    print("\nAll checks passed.")
    sys.exit(0)
else:
    print("\nSome checks failed.")
    sys.exit(1)
