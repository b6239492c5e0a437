import requests
import time
import random
import argparse
from datetime import datetime

EVENT_NAMES = ["login", "logout", "page_view", "click", "purchase"]


def make_event(source, idx):
    evt = {
        "created": datetime.utcnow().isoformat() + "Z",
        "event_name": random.choice(EVENT_NAMES),
        "event_details": {"source": source, "idx": str(idx)}
    }
    if random.random() < 0.1:  # occasionally drop a required field to exercise validation
        del evt["event_details"]
    return evt


def publish(url, event):
    r = requests.post(url + "/event/submit", json=event, timeout=10)
    print("submit status", r.status_code, r.text)
    return r.status_code


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--count", type=int, default=100)
    parser.add_argument("--url", type=str, default="http://localhost:8080")
    parser.add_argument("--source", default="sim")
    args = parser.parse_args()

    created = 0
    rejected = 0
    for i in range(args.count):
        status = publish(args.url, make_event(args.source, i))
        if status == 201:
            created += 1
        else:
            rejected += 1
        time.sleep(0.01)

    r = requests.get(args.url + "/alldata", timeout=10)
    total = len(r.json()["data"]["data"] or []) if r.ok else None
    print(f"created={created} rejected={rejected} stored_total={total}")
