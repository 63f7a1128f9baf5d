# -*- coding: utf-8 -*-
"""
Smart Campus Chatbot - Smoke Tests
==================================
Hits a running server and checks the chatbot contract:
  1. Topic questions  -> 200 with source ai|fallback
  2. Empty message    -> 400 "Message is required"
  3. Status endpoint  -> reports AI capability

Usage (server must be running):
  python scripts/qa/smoke_chatbot.py
  python scripts/qa/smoke_chatbot.py --base http://localhost:5000/api --token <jwt>
"""

import argparse
import os
import sys
from dataclasses import dataclass, field

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from smart_campus.client import DEFAULT_BASE_URL, CampusChatbotClient


class C:
    GREEN  = "\033[92m"
    RED    = "\033[91m"
    CYAN   = "\033[96m"
    BOLD   = "\033[1m"
    RESET  = "\033[0m"


def ok(msg):   print(f"  {C.GREEN}[PASS]{C.RESET} {msg}")
def fail(msg): print(f"  {C.RED}[FAIL]{C.RESET} {msg}")
def head(msg): print(f"\n{C.BOLD}{C.CYAN}{msg}{C.RESET}")


@dataclass
class Results:
    passed: int = 0
    failed: int = 0
    cases: list = field(default_factory=list)

    def record(self, label: str, passed: bool, detail: str = ""):
        if passed:
            self.passed += 1
            ok(label)
        else:
            self.failed += 1
            fail(label)
        if detail:
            print(f"     -> {detail[:160]}")
        self.cases.append({"label": label, "passed": passed, "detail": detail})

    def summary(self):
        total = self.passed + self.failed
        colour = C.GREEN if self.failed == 0 else C.RED
        print(f"\n{C.BOLD}Results: {colour}{self.passed}/{total} passed{C.RESET}")


TOPIC_CASES = [
    ("When is the next event?", "event"),
    ("I lost my ID card", "lost"),
    ("Tell me about campus clubs", "club"),
    ("How do I file a complaint?", "feedback"),
    ("Where can I see my grade?", "academic"),
    ("What services does the university offer?", "services"),
    ("hello", None),
]


def run(client: CampusChatbotClient, token: str = None) -> Results:
    R = Results()

    head("1. Topic questions")
    for message, keyword in TOPIC_CASES:
        resp = client.send_message(message, token=token)
        data = resp.get("data") or {}
        label = f"'{message}'"
        R.record(label + " [200]", resp.get("success") is True, resp.get("error", ""))
        R.record(label + " [source]", data.get("source") in ("ai", "fallback"), f"source={data.get('source')}")
        if keyword and data.get("source") == "fallback":
            text = (data.get("message") or "").lower()
            R.record(label + f" [mentions {keyword}]", keyword in text, text[:100])

    head("2. Empty message")
    resp = client.send_message("", token=token)
    R.record("empty -> error", resp.get("success") is False, resp.get("error", ""))
    R.record("empty -> 'Message is required'", resp.get("error") == "Message is required")

    head("3. Status")
    try:
        status = client.status()
        R.record("status has ai_enabled", "ai_enabled" in status, str(status)[:160])
    except Exception as e:
        R.record("status reachable", False, str(e))

    R.summary()
    return R


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke test a running chatbot server")
    parser.add_argument("--base", default=DEFAULT_BASE_URL)
    parser.add_argument("--token", default=None)
    args = parser.parse_args()

    results = run(CampusChatbotClient(args.base), token=args.token)
    sys.exit(0 if results.failed == 0 else 1)
