"""Manual smoke client. Run the server with QA_MODE=true, then:

    python scripts/ws_test_client.py "I feel frozen and stuck"
"""
import asyncio
import base64
import json
import sys
import urllib.parse

import websockets


async def main(utterance: str, token: str = ""):
    query = urllib.parse.urlencode({"token": token}) if token else ""
    url = f"ws://127.0.0.1:3001/ws/voice{'?' + query if query else ''}"
    async with websockets.connect(url, max_size=None) as ws:
        session = json.loads(await ws.recv())
        print("session:", session.get("session_id"), "token:", session.get("identity_token"))

        # greeting: response + audio
        for _ in range(2):
            print(json.loads(await ws.recv()).get("type"))

        # QA mode reads the "audio" field as UTF-8 text
        await ws.send(json.dumps({
            "type": "audio",
            "audio": base64.b64encode(utterance.encode("utf-8")).decode("ascii"),
        }))

        while True:
            msg = json.loads(await ws.recv())
            shown = {k: v for k, v in msg.items() if k != "audio"}
            print(shown)
            if msg.get("type") in {"audio", "error"}:
                break

        await ws.send(json.dumps({
            "type": "session_complete",
            "state": "stuck",
            "frequency": None,
            "duration": 42,
            "outcome": "helpful",
        }))
        await ws.send(json.dumps({"type": "save_note", "text": "Shaking it out helped.", "state": "stuck"}))
        await asyncio.sleep(0.2)


if __name__ == "__main__":
    asyncio.run(main(*(sys.argv[1:3] or ["I feel frozen and stuck"])))
